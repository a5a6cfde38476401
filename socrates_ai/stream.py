"""Unified streaming helpers for provider responses."""

from __future__ import annotations

from typing import Optional

from .providers import gemini as gemini_provider
from .providers import openai as openai_provider
from .streaming import ReplyEventStream
from .types import Context, Model, ModelReply, StreamOptions


def stream(
    model: Model,
    context: Context,
    options: Optional[StreamOptions] = None,
) -> ReplyEventStream:
    if model.api == "openai-completions":
        return openai_provider.stream_openai_completions(model, context, options)
    if model.api == "gemini-generate-content":
        return gemini_provider.stream_gemini(model, context, options)
    raise NotImplementedError(f"Streaming not implemented for API: {model.api}")


async def complete(
    model: Model,
    context: Context,
    options: Optional[StreamOptions] = None,
) -> ModelReply:
    response = stream(model, context, options)
    return await response.result()
