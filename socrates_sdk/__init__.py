"""SDK for embedding the socrates explorer."""

from .sdk import Explorer, create_explorer

__all__ = [
    "Explorer",
    "create_explorer",
]
