"""Chat session manager: one conversation thread per explored node."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence
from uuid import uuid4

from .client import ChatClient, build_chat_request
from .questions import extract_suggested_questions
from .types import ChatMessage, ChatMode, ChatSession

logger = logging.getLogger(__name__)

ChatEvent = Dict[str, Any]

APOLOGY_MESSAGE = "I'm having trouble connecting to the library archives right now."


def _generate_id() -> str:
    return uuid4().hex[:8]


def opener_for(node_title: str) -> str:
    return f"Tell me about {node_title}"


@dataclass
class ChatState:
    sessions: Dict[str, ChatSession] = field(default_factory=dict)
    list_order: List[str] = field(default_factory=list)
    active_chat_id: Optional[str] = None
    is_chat_open: bool = False
    is_chat_expanded: bool = False
    loading_ids: set[str] = field(default_factory=set)


class ChatSessionManager:
    def __init__(
        self,
        client: ChatClient,
        *,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._client = client
        self._id_factory = id_factory or _generate_id
        self._state = ChatState()
        self._listeners: set[Callable[[ChatEvent], None]] = set()

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def active_session(self) -> Optional[ChatSession]:
        if self._state.active_chat_id is None:
            return None
        return self._state.sessions.get(self._state.active_chat_id)

    @property
    def is_chat_loading(self) -> bool:
        return self._state.active_chat_id in self._state.loading_ids

    def subscribe(self, fn: Callable[[ChatEvent], None]) -> Callable[[], None]:
        self._listeners.add(fn)

        def unsubscribe() -> None:
            self._listeners.discard(fn)

        return unsubscribe

    def get_session(self, session_id: str) -> ChatSession:
        if session_id not in self._state.sessions:
            raise KeyError(f"Chat session not found: {session_id}")
        return self._state.sessions[session_id]

    def sessions(self) -> List[ChatSession]:
        return [self._state.sessions[session_id] for session_id in self._state.list_order]

    def switch_chat(self, session_id: str) -> None:
        self.get_session(session_id)
        self._state.active_chat_id = session_id
        self._emit({"type": "session_switched", "session_id": session_id})

    def toggle_chat(self) -> None:
        self._state.is_chat_open = not self._state.is_chat_open

    def toggle_chat_expanded(self) -> None:
        self._state.is_chat_expanded = not self._state.is_chat_expanded

    def visible_messages(self) -> List[ChatMessage]:
        session = self.active_session
        return session.visible_messages() if session else []

    def latest_suggested_questions(self) -> List[str]:
        session = self.active_session
        if session is None:
            return []
        message = session.last_model_message()
        return list(message.suggested_questions or []) if message else []

    async def trigger_chat(
        self,
        node_id: str,
        node_title: str,
        mode: ChatMode = "explore",
        specific_question: Optional[str] = None,
        open_chat: bool = True,
        ancestry_path: Sequence[str] = (),
    ) -> Optional[ChatMessage]:
        """Ask about ``node_id`` and stream the reply into its session.

        Returns the model message, or ``None`` when the session already has a
        request in flight.
        """
        session = self._resolve_session(node_id, node_title, ancestry_path)
        if open_chat:
            self._state.is_chat_open = True
        if session.id in self._state.loading_ids:
            logger.info(f"Chat {session.id} is busy; ignoring new message")
            return None

        history = list(session.messages)
        if specific_question:
            prompt = ChatMessage(role="user", content=specific_question)
        else:
            prompt = ChatMessage(role="user", content=opener_for(node_title), hidden=True)
        session.messages.append(prompt)

        reply = ChatMessage(role="model", content="", streaming=True)
        session.messages.append(reply)
        self._state.loading_ids.add(session.id)
        self._emit({"type": "message_start", "session_id": session.id, "message": reply})

        request = build_chat_request(
            prompt.content,
            node_title,
            mode,
            history,
            ancestry_path=session.ancestry_path,
        )

        try:
            async for fragment in self._client.stream(request):
                reply.content += fragment
                self._emit({"type": "message_update", "session_id": session.id, "message": reply})

            content, questions = extract_suggested_questions(reply.content)
            reply.content = content
            reply.suggested_questions = questions
        except Exception:
            logger.exception(f"Chat failed for {node_id}")
            reply.content = APOLOGY_MESSAGE
            reply.suggested_questions = None
        finally:
            reply.streaming = False
            self._state.loading_ids.discard(session.id)
            self._emit({"type": "message_end", "session_id": session.id, "message": reply})

        return reply

    async def send_message(self, text: str) -> Optional[ChatMessage]:
        session = self.active_session
        if session is None or not text.strip():
            return None
        return await self.trigger_chat(
            session.node_id,
            session.node_title,
            "chat",
            specific_question=text,
            ancestry_path=session.ancestry_path,
        )

    def _resolve_session(self, node_id: str, node_title: str, ancestry_path: Sequence[str]) -> ChatSession:
        active = self.active_session
        if active is not None and active.node_id == node_id:
            return active

        session = ChatSession(
            id=self._id_factory(),
            node_id=node_id,
            node_title=node_title,
            ancestry_path=list(ancestry_path),
        )
        self._state.sessions[session.id] = session
        self._state.list_order.insert(0, session.id)
        self._state.active_chat_id = session.id
        logger.info(f"Started chat {session.id} for {node_id}")
        self._emit({"type": "session_created", "session_id": session.id})
        return session

    def _emit(self, event: ChatEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
