"""Streaming client for the chat endpoint."""

from __future__ import annotations

import json
from typing import Any, AsyncIterator, Dict, Optional, Protocol, Sequence

import httpx

from socrates_ai.sse import is_done, read_data_line

from .types import ChatMessage, ChatMode


class ChatStreamError(RuntimeError):
    """The chat stream could not be opened or ended before ``[DONE]``."""


class ChatClient(Protocol):
    def stream(self, request: Dict[str, Any]) -> AsyncIterator[str]: ...


def build_chat_request(
    message: str,
    node_title: str,
    mode: ChatMode,
    history: Sequence[ChatMessage],
    ancestry_path: Sequence[str] = (),
) -> Dict[str, Any]:
    return {
        "message": message,
        "nodeTitle": node_title,
        "ancestryPath": list(ancestry_path),
        "mode": mode,
        "history": [turn.to_history() for turn in history if turn.content],
    }


class HttpChatClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self._base_url}/api/chat"

    async def stream(self, request: Dict[str, Any]) -> AsyncIterator[str]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                async with client.stream("POST", self.url, json=request) as response:
                    if response.status_code >= 400:
                        body = await response.aread()
                        raise ChatStreamError(_error_message(body, response.status_code))

                    async for line in response.aiter_lines():
                        data = read_data_line(line)
                        if data is None:
                            continue
                        if is_done(data):
                            return
                        text = _parse_text(data)
                        if text:
                            yield text
        except httpx.HTTPError as exc:
            raise ChatStreamError(f"Chat request failed: {exc}") from exc

        raise ChatStreamError("Chat stream ended before [DONE]")


def _parse_text(data: str) -> str:
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as exc:
        raise ChatStreamError(f"Malformed stream frame: {data[:80]}") from exc
    if not isinstance(payload, dict):
        raise ChatStreamError(f"Malformed stream frame: {data[:80]}")
    if payload.get("error"):
        raise ChatStreamError(str(payload["error"]))
    return str(payload.get("text") or "")


def _error_message(body: bytes, status_code: int) -> str:
    try:
        data = json.loads(body)
    except ValueError:
        return f"Chat request failed (HTTP {status_code})"
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"Chat request failed (HTTP {status_code})"
