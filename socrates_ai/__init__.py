"""LLM layer for socrates."""

from .models import create_gemini_model, create_openai_model, get_model, register_model
from .stream import complete, stream

__all__ = [
    "auth",
    "models",
    "providers",
    "sse",
    "streaming",
    "stream",
    "complete",
    "types",
    "create_openai_model",
    "create_gemini_model",
    "get_model",
    "register_model",
]
