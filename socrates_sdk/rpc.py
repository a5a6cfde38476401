"""JSON-over-stdin/stdout RPC bridge for the socrates explorer."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Optional

from socrates_chat.types import ChatMessage
from socrates_sdk.sdk import Explorer, create_explorer


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, ChatMessage):
        # Partially streamed question markers never reach the client.
        return {**value.model_dump(), "content": value.display_content}
    if hasattr(value, "model_dump"):
        return value.model_dump()  # type: ignore[call-arg]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, dict):
        return {key: _to_jsonable(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_jsonable(item) for item in value]
    return value


def _emit(obj: Any) -> None:
    sys.stdout.write(json.dumps(_to_jsonable(obj)) + "\n")
    sys.stdout.flush()


def _success(command: str, request_id: Optional[str] = None, data: Optional[dict] = None) -> dict:
    payload = {"type": "response", "command": command, "success": True}
    if request_id:
        payload["id"] = request_id
    if data is not None:
        payload["data"] = data
    return payload


def _error(command: str, message: str, request_id: Optional[str] = None) -> dict:
    payload = {"type": "response", "command": command, "success": False, "error": message}
    if request_id:
        payload["id"] = request_id
    return payload


def _build_state(explorer: Explorer) -> dict:
    graph = explorer.graph.state
    chat = explorer.chat.state
    return {
        "active_path": list(graph.active_path),
        "is_loading": graph.is_loading,
        "fetching_ids": sorted(graph.fetching_ids),
        "last_error": graph.last_error,
        "node_count": len(explorer.graph.cache),
        "is_chat_open": chat.is_chat_open,
        "is_chat_expanded": chat.is_chat_expanded,
        "is_chat_loading": explorer.chat.is_chat_loading,
        "active_chat_id": chat.active_chat_id,
        "chat_count": len(chat.sessions),
    }


def _require_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    return value if isinstance(value, str) and value else None


async def _handle_select(explorer: Explorer, payload: Dict[str, Any]) -> None:
    request_id = payload.get("id")
    node_id = _require_str(payload, "node_id")
    depth = payload.get("depth")
    if node_id is None or not isinstance(depth, int) or depth < 0:
        _emit(_error("select", "select requires 'node_id' and a non-negative 'depth'", request_id))
        return
    await explorer.select(node_id, depth)
    _emit(_success("select", request_id, {"rows": _to_jsonable(explorer.rows())}))


async def _handle_more(explorer: Explorer, payload: Dict[str, Any]) -> None:
    request_id = payload.get("id")
    node_id = _require_str(payload, "node_id")
    if node_id is None:
        _emit(_error("more", "more requires 'node_id'", request_id))
        return
    await explorer.more(node_id)
    info = explorer.graph.get_node_page_info(node_id)
    _emit(_success("more", request_id, {"page_info": _to_jsonable(info)}))


async def _handle_set_page(explorer: Explorer, payload: Dict[str, Any]) -> None:
    request_id = payload.get("id")
    node_id = _require_str(payload, "node_id")
    page = payload.get("page")
    if node_id is None or not isinstance(page, int):
        _emit(_error("set_page", "set_page requires 'node_id' and integer 'page'", request_id))
        return
    try:
        explorer.set_page(node_id, page)
    except KeyError as exc:
        _emit(_error("set_page", str(exc), request_id))
        return
    info = explorer.graph.get_node_page_info(node_id)
    _emit(_success("set_page", request_id, {"page_info": _to_jsonable(info)}))


async def _handle_explore(explorer: Explorer, payload: Dict[str, Any]) -> None:
    request_id = payload.get("id")
    node_id = _require_str(payload, "node_id")
    if node_id is None or node_id not in explorer.graph.cache:
        _emit(_error("explore", "explore requires a known 'node_id'", request_id))
        return
    _emit(_success("explore", request_id))
    await explorer.explore(node_id)


async def _handle_ask(explorer: Explorer, payload: Dict[str, Any]) -> None:
    request_id = payload.get("id")
    node_id = _require_str(payload, "node_id")
    question = _require_str(payload, "question")
    if node_id is None or question is None or node_id not in explorer.graph.cache:
        _emit(_error("ask", "ask requires a known 'node_id' and a 'question'", request_id))
        return
    _emit(_success("ask", request_id))
    await explorer.ask(node_id, question)


async def _handle_send(explorer: Explorer, payload: Dict[str, Any]) -> None:
    request_id = payload.get("id")
    message = _require_str(payload, "message")
    if message is None:
        _emit(_error("send", "send requires a 'message' string", request_id))
        return
    if explorer.chat.active_session is None:
        _emit(_error("send", "No active chat session", request_id))
        return
    _emit(_success("send", request_id))
    await explorer.send(message)


def _handle_switch_chat(explorer: Explorer, payload: Dict[str, Any]) -> None:
    request_id = payload.get("id")
    session_id = _require_str(payload, "session_id")
    if session_id is None:
        _emit(_error("switch_chat", "switch_chat requires 'session_id'", request_id))
        return
    try:
        explorer.chat.switch_chat(session_id)
    except KeyError as exc:
        _emit(_error("switch_chat", str(exc), request_id))
        return
    _emit(_success("switch_chat", request_id))


def _handle_get_messages(explorer: Explorer, payload: Dict[str, Any]) -> None:
    data = {
        "messages": _to_jsonable(explorer.chat.visible_messages()),
        "suggested_questions": explorer.chat.latest_suggested_questions(),
    }
    _emit(_success("get_messages", payload.get("id"), data))


def _forward_event(event: Dict[str, Any]) -> None:
    _emit({**event, "type": f"event:{event.get('type')}"})


async def _read_lines() -> None:
    explorer = create_explorer()
    explorer.graph.subscribe(_forward_event)
    explorer.chat.subscribe(_forward_event)

    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as exc:
            _emit(_error("unknown", f"Invalid JSON: {exc}"))
            continue
        msg_type = data.get("type")

        if msg_type == "select":
            await _handle_select(explorer, data)
        elif msg_type == "more":
            await _handle_more(explorer, data)
        elif msg_type == "set_page":
            await _handle_set_page(explorer, data)
        elif msg_type == "get_rows":
            _emit(_success("get_rows", data.get("id"), {"rows": _to_jsonable(explorer.rows())}))
        elif msg_type == "explore":
            await _handle_explore(explorer, data)
        elif msg_type == "ask":
            await _handle_ask(explorer, data)
        elif msg_type == "send":
            await _handle_send(explorer, data)
        elif msg_type == "switch_chat":
            _handle_switch_chat(explorer, data)
        elif msg_type == "toggle_chat":
            explorer.chat.toggle_chat()
            _emit(_success("toggle_chat", data.get("id")))
        elif msg_type == "toggle_chat_expanded":
            explorer.chat.toggle_chat_expanded()
            _emit(_success("toggle_chat_expanded", data.get("id")))
        elif msg_type == "get_chats":
            chats = [
                {"id": s.id, "node_title": s.node_title, "preview": s.preview()}
                for s in explorer.chat.sessions()
            ]
            _emit(_success("get_chats", data.get("id"), {"chats": chats}))
        elif msg_type == "get_messages":
            _handle_get_messages(explorer, data)
        elif msg_type == "get_state":
            _emit(_success("get_state", data.get("id"), _build_state(explorer)))
        else:
            _emit(_error(msg_type or "unknown", "Unknown message type", data.get("id")))


def main() -> None:
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)
    asyncio.run(_read_lines())


if __name__ == "__main__":
    main()
