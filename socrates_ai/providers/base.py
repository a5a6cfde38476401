"""Abstract provider interface."""

from __future__ import annotations

from typing import Protocol

from ..streaming import ReplyEventStream
from ..types import Context, Model, StreamOptions


class StreamFunction(Protocol):
    def __call__(
        self,
        model: Model,
        context: Context,
        options: StreamOptions | None = None,
    ) -> ReplyEventStream: ...
