"""Core types for provider models, chat turns, and stream options."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Api = Literal["openai-completions", "gemini-generate-content"]
StopReason = Literal["stop", "length", "safety", "error"]
Role = Literal["user", "model"]
ResponseFormat = Literal["text", "json_object"]


class Model(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    api: Api
    provider: str
    name: Optional[str] = None
    base_url: str = "https://api.openai.com/v1"
    max_tokens: Optional[int] = None
    headers: Dict[str, str] = Field(default_factory=dict)


class ChatTurn(BaseModel):
    """A single provider-neutral conversation turn.

    ``model`` is the assistant role, matching the chat endpoint's history
    format; providers translate it to their own role names.
    """

    model_config = ConfigDict(extra="forbid")

    role: Role
    content: str


class Context(BaseModel):
    model_config = ConfigDict(extra="forbid")

    system_prompt: Optional[str] = None
    messages: List[ChatTurn] = Field(default_factory=list)


class ModelReply(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str = ""
    api: Api
    provider: str
    model: str
    stop_reason: StopReason = "stop"
    error_message: Optional[str] = None
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))


@dataclass
class StreamOptions:
    api_key: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    response_format: Optional[ResponseFormat] = None
    timeout: Optional[float] = None
    on_payload: Optional[Callable[[Dict[str, Any]], None]] = None
