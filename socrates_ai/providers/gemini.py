"""Gemini generateContent provider (server-sent events)."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional

import httpx

from ..auth import resolve_api_key
from ..sse import read_data_line, sanitize_surrogates
from ..streaming import ReplyEventStream
from ..types import Context, Model, ModelReply, StopReason, StreamOptions


def stream_gemini(
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
            url = _build_url(model)
            timeout = options.timeout if options else None

            async with httpx.AsyncClient(timeout=timeout) as client:
                async with client.stream(
                    "POST", url, params={"alt": "sse"}, json=params, headers=headers
                ) as response:
                    response.raise_for_status()
                    stream.push({"type": "start", "partial": output})

                    async for line in response.aiter_lines():
                        data = read_data_line(line)
                        if not data:
                            continue

                        chunk = json.loads(data)
                        candidates = chunk.get("candidates") or []
                        if not candidates:
                            continue
                        candidate = candidates[0]
                        if candidate.get("finishReason"):
                            output.stop_reason = _map_stop_reason(candidate["finishReason"])

                        parts = (candidate.get("content") or {}).get("parts") or []
                        text_delta = "".join(part.get("text", "") for part in parts if not part.get("thought"))
                        if text_delta:
                            output.text += text_delta
                            stream.push({"type": "text_delta", "delta": text_delta, "partial": output})

            stream.push({"type": "done", "reason": output.stop_reason, "reply": output})
            stream.end(output)
        except Exception as error:
            output.stop_reason = "error"
            output.error_message = str(error)
            stream.push({"type": "error", "reason": output.stop_reason, "reply": output})
            stream.end(output)

    asyncio.create_task(run())
    return stream


def _build_url(model: Model) -> str:
    return f"{model.base_url.rstrip('/')}/models/{model.id}:streamGenerateContent"


def _build_headers(
    model: Model,
    api_key: str,
    options_headers: Optional[Dict[str, str]],
) -> Dict[str, str]:
    headers: Dict[str, str] = {"x-goog-api-key": api_key, "Content-Type": "application/json"}
    headers.update(model.headers)
    if options_headers:
        headers.update(options_headers)
    return headers


def _build_params(model: Model, context: Context, options: Optional[StreamOptions]) -> Dict[str, Any]:
    params: Dict[str, Any] = {"contents": _convert_messages(context)}

    if context.system_prompt:
        params["systemInstruction"] = {"parts": [{"text": sanitize_surrogates(context.system_prompt)}]}

    generation_config: Dict[str, Any] = {}
    max_tokens = (options.max_tokens if options else None) or model.max_tokens
    if max_tokens:
        generation_config["maxOutputTokens"] = max_tokens
    if options and options.temperature is not None:
        generation_config["temperature"] = options.temperature
    if options and options.response_format == "json_object":
        generation_config["responseMimeType"] = "application/json"
    if generation_config:
        params["generationConfig"] = generation_config

    return params


def _convert_messages(context: Context) -> List[Dict[str, Any]]:
    return [
        {"role": turn.role, "parts": [{"text": sanitize_surrogates(turn.content)}]}
        for turn in context.messages
    ]


def _map_stop_reason(reason: str) -> StopReason:
    if reason == "MAX_TOKENS":
        return "length"
    if reason in {"SAFETY", "RECITATION", "BLOCKLIST", "PROHIBITED_CONTENT"}:
        return "safety"
    return "stop"
