"""HTTP API for socrates."""

from .config import Settings
from .main import create_app

__all__ = [
    "Settings",
    "create_app",
]
