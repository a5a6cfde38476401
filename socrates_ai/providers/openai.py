"""OpenAI Completions API provider."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional

import httpx

from ..auth import resolve_api_key
from ..sse import is_done, read_data_line, sanitize_surrogates
from ..streaming import ReplyEventStream
from ..types import Context, Model, ModelReply, StopReason, StreamOptions


def stream_openai_completions(
    model: Model,
    context: Context,
    options: Optional[StreamOptions] = None,
) -> ReplyEventStream:
    stream = ReplyEventStream()

    async def run() -> None:
        output = ModelReply(api=model.api, provider=model.provider, model=model.id)

        try:
            api_key = resolve_api_key(model.provider, options.api_key if options else None)

            params = _build_params(model, context, options)
            if options and options.on_payload:
                options.on_payload(params)

            headers = _build_headers(model, api_key, options.headers if options else None)
            url = _build_url(model.base_url)
            timeout = options.timeout if options else None

            async with httpx.AsyncClient(timeout=timeout) as client:
                async with client.stream("POST", url, json=params, headers=headers) as response:
                    response.raise_for_status()
                    stream.push({"type": "start", "partial": output})

                    async for line in response.aiter_lines():
                        data = read_data_line(line)
                        if data is None:
                            continue
                        if is_done(data):
                            break

                        chunk = json.loads(data)
                        choices = chunk.get("choices") or []
                        if not choices:
                            continue
                        choice = choices[0]
                        if choice.get("finish_reason"):
                            output.stop_reason = _map_stop_reason(choice["finish_reason"])

                        delta = choice.get("delta") or {}
                        content_delta = delta.get("content")
                        if content_delta:
                            output.text += content_delta
                            stream.push({"type": "text_delta", "delta": content_delta, "partial": output})

            stream.push({"type": "done", "reason": output.stop_reason, "reply": output})
            stream.end(output)
        except Exception as error:
            output.stop_reason = "error"
            output.error_message = str(error)
            stream.push({"type": "error", "reason": output.stop_reason, "reply": output})
            stream.end(output)

    asyncio.create_task(run())
    return stream


def _build_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    if base.endswith("/chat/completions"):
        return base
    if base.endswith("/v1"):
        return f"{base}/chat/completions"
    return f"{base}/v1/chat/completions"


def _build_headers(
    model: Model,
    api_key: str,
    options_headers: Optional[Dict[str, str]],
) -> Dict[str, str]:
    headers: Dict[str, str] = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    headers.update(model.headers)
    if options_headers:
        headers.update(options_headers)
    return headers


def _build_params(
    model: Model,
    context: Context,
    options: Optional[StreamOptions],
) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "model": model.id,
        "messages": _convert_messages(context),
        "stream": True,
    }

    max_tokens = options.max_tokens if options else None
    if max_tokens is None:
        max_tokens = model.max_tokens
    if max_tokens:
        params["max_completion_tokens"] = max_tokens

    if options and options.temperature is not None:
        params["temperature"] = options.temperature

    if options and options.response_format == "json_object":
        params["response_format"] = {"type": "json_object"}

    return params


def _convert_messages(context: Context) -> List[Dict[str, Any]]:
    messages: List[Dict[str, Any]] = []
    if context.system_prompt:
        messages.append({"role": "system", "content": sanitize_surrogates(context.system_prompt)})
    for turn in context.messages:
        role = "assistant" if turn.role == "model" else "user"
        messages.append({"role": role, "content": sanitize_surrogates(turn.content)})
    return messages


def _map_stop_reason(reason: Optional[str]) -> StopReason:
    if reason == "length":
        return "length"
    if reason == "content_filter":
        return "safety"
    return "stop"
