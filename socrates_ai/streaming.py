"""Reply event streams shared by the providers and the chat route."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Literal, Optional, TypedDict

from .types import ModelReply, StopReason

ReplyEventType = Literal["start", "text_delta", "done", "error"]

TERMINAL_EVENT_TYPES = frozenset({"done", "error"})


class ReplyEvent(TypedDict, total=False):
    type: ReplyEventType
    delta: str
    reason: StopReason
    partial: ModelReply
    reply: ModelReply


class ReplyEventStream(AsyncIterator[ReplyEvent]):
    """Queue-backed stream of :class:`ReplyEvent` items.

    A provider pushes ``start``, then ``text_delta`` events, then exactly one
    ``done`` or ``error`` event carrying the accumulated :class:`ModelReply`.
    That reply is also what :meth:`result` resolves to. Events pushed after the
    terminal event or after :meth:`end` are dropped.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Optional[ReplyEvent]] = asyncio.Queue()
        self._closed = False
        self._finished = False
        self._result: Optional[ModelReply] = None
        self._result_event = asyncio.Event()

    @property
    def finished(self) -> bool:
        return self._finished

    def push(self, event: ReplyEvent) -> None:
        if self._closed or self._finished:
            return
        if event["type"] in TERMINAL_EVENT_TYPES:
            self._finished = True
            self._set_result(event["reply"])
        self._queue.put_nowait(event)

    def end(self, result: Optional[ModelReply] = None) -> None:
        if result is not None:
            self._set_result(result)
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    async def result(self) -> ModelReply:
        await self._result_event.wait()
        if self._result is None:
            raise RuntimeError("Stream finished without a reply.")
        return self._result

    async def first(self) -> Optional[ReplyEvent]:
        """Wait for the next event without giving up the rest of the stream.

        Returns ``None`` when the stream closed without events.
        """
        try:
            return await self.__anext__()
        except StopAsyncIteration:
            return None

    async def text_deltas(self) -> AsyncIterator[str]:
        """Yield text fragments, raising if the provider reported an error."""
        async for event in self:
            if event["type"] == "text_delta":
                yield event["delta"]
            elif event["type"] == "error":
                raise RuntimeError(event["reply"].error_message or "Provider stream failed")

    def _set_result(self, reply: ModelReply) -> None:
        if self._result is None:
            self._result = reply
            self._result_event.set()

    def __aiter__(self) -> "ReplyEventStream":
        return self

    async def __anext__(self) -> ReplyEvent:
        item = await self._queue.get()
        if item is None:
            raise StopAsyncIteration
        return item
