"""Chat sessions for socrates."""

from .client import ChatClient, ChatStreamError, HttpChatClient, build_chat_request
from .manager import APOLOGY_MESSAGE, ChatSessionManager, ChatState
from .questions import extract_suggested_questions, strip_partial_marker
from .types import ChatMessage, ChatSession

__all__ = [
    "APOLOGY_MESSAGE",
    "ChatClient",
    "ChatMessage",
    "ChatSession",
    "ChatSessionManager",
    "ChatState",
    "ChatStreamError",
    "HttpChatClient",
    "build_chat_request",
    "extract_suggested_questions",
    "strip_partial_marker",
]
