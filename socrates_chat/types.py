"""Chat messages and sessions."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .questions import strip_partial_marker

ChatRole = Literal["user", "model"]
ChatMode = Literal["explore", "chat"]


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: ChatRole
    content: str = ""
    hidden: bool = False
    suggested_questions: Optional[List[str]] = None
    streaming: bool = Field(default=False, exclude=True)

    @property
    def display_content(self) -> str:
        if self.streaming:
            return strip_partial_marker(self.content)
        return self.content

    def to_history(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}


class ChatSession(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    node_id: str
    node_title: str
    ancestry_path: List[str] = Field(default_factory=list)
    messages: List[ChatMessage] = Field(default_factory=list)
    created_at: int = Field(default_factory=lambda: int(time.time() * 1000))

    def visible_messages(self) -> List[ChatMessage]:
        return [message for message in self.messages if not message.hidden]

    def last_model_message(self) -> Optional[ChatMessage]:
        for message in reversed(self.messages):
            if message.role == "model":
                return message
        return None

    def preview(self, limit: int = 60) -> str:
        if not self.messages:
            return "New conversation"
        content = self.messages[-1].content
        return content[:limit] + ("..." if len(content) > limit else "")
