"""Provider implementations and interfaces."""

from __future__ import annotations

from .gemini import stream_gemini
from .openai import stream_openai_completions

__all__ = [
    "base",
    "gemini",
    "openai",
    "stream_gemini",
    "stream_openai_completions",
]
