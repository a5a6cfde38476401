import asyncio
import io
import json
import types

import pytest

from socrates_chat.types import ChatMessage
from socrates_graph.types import PageInfo
from socrates_sdk import create_explorer, rpc
from socrates_server.config import Settings
from tests.helpers import FakeChatClient, FakeGenerationClient, create_taxonomy, ok


def _explorer(generation=None, chat=None):
    return create_explorer(
        settings=Settings(_env_file=None),
        taxonomy=create_taxonomy(),
        generation_client=generation or FakeGenerationClient(),
        chat_client=chat or FakeChatClient(),
    )


@pytest.fixture
def stdout(monkeypatch):
    buffer = io.StringIO()
    # Replace rpc's own ``sys`` reference: pytest re-installs its capture
    # stream on the real ``sys.stdout`` between fixture setup and the test call.
    monkeypatch.setattr(rpc, "sys", types.SimpleNamespace(stdout=buffer))
    return buffer


def _lines(buffer):
    return [json.loads(line) for line in buffer.getvalue().strip().splitlines()]


def test_to_jsonable_handles_models_and_dataclasses():
    assert rpc._to_jsonable(PageInfo(current=1, total=2, has_children=True)) == {
        "current": 1,
        "total": 2,
        "has_children": True,
    }
    message = rpc._to_jsonable({"message": ChatMessage(role="model", content="hi")})
    assert message["message"]["content"] == "hi"


@pytest.mark.asyncio
async def test_select_emits_rows(stdout):
    explorer = _explorer(FakeGenerationClient([ok("Physics", "Chemistry")]))

    await rpc._handle_select(explorer, {"id": "1", "node_id": "science", "depth": 0})

    response = _lines(stdout)[-1]
    assert response["type"] == "response"
    assert response["command"] == "select"
    assert response["success"] is True
    assert response["id"] == "1"
    rows = response["data"]["rows"]
    assert [card["title"] for card in rows[1]["cards"]] == ["Physics", "Chemistry"]
    assert rows[1]["pageInfo"] == {"current": 1, "total": 1, "hasChildren": True}


@pytest.mark.asyncio
async def test_select_requires_depth(stdout):
    await rpc._handle_select(_explorer(), {"node_id": "science"})
    response = _lines(stdout)[-1]
    assert response["success"] is False


@pytest.mark.asyncio
async def test_set_page_unknown_node_is_error(stdout):
    await rpc._handle_set_page(_explorer(), {"node_id": "missing", "page": 0})
    response = _lines(stdout)[-1]
    assert response["command"] == "set_page"
    assert response["success"] is False


@pytest.mark.asyncio
async def test_explore_forwards_chat_events(stdout):
    explorer = _explorer(chat=FakeChatClient([["Hello"]]))
    explorer.chat.subscribe(rpc._forward_event)

    await rpc._handle_explore(explorer, {"id": "7", "node_id": "history"})

    output = _lines(stdout)
    assert output[0] == {"type": "response", "command": "explore", "success": True, "id": "7"}
    types = [line["type"] for line in output[1:]]
    assert types[0] == "event:session_created"
    assert types[-1] == "event:message_end"
    assert output[-1]["message"]["content"] == "Hello"


@pytest.mark.asyncio
async def test_send_without_session_is_error(stdout):
    await rpc._handle_send(_explorer(), {"message": "hi"})
    response = _lines(stdout)[-1]
    assert response["error"] == "No active chat session"


def test_switch_chat_unknown_session_is_error(stdout):
    rpc._handle_switch_chat(_explorer(), {"session_id": "nope"})
    response = _lines(stdout)[-1]
    assert response["success"] is False


def test_build_state_summarizes_explorer():
    state = rpc._build_state(_explorer())
    assert state["active_path"] == []
    assert state["node_count"] == 5
    assert state["chat_count"] == 0
    assert state["is_chat_open"] is False


@pytest.mark.asyncio
async def test_streamed_message_events_hide_partial_marker(stdout):
    chunks = ["Answer.", '\n<!--QUESTIONS:["Wh', 'y?"]-->']
    explorer = _explorer(chat=FakeChatClient([chunks]))
    explorer.chat.subscribe(rpc._forward_event)

    await rpc._handle_explore(explorer, {"node_id": "history"})

    output = _lines(stdout)
    updates = [line for line in output if line["type"] == "event:message_update"]
    assert [line["message"]["content"] for line in updates] == ["Answer.", "Answer.", "Answer."]
    end = output[-1]
    assert end["type"] == "event:message_end"
    assert end["message"]["content"] == "Answer."
    assert end["message"]["suggested_questions"] == ["Why?"]


@pytest.mark.asyncio
async def test_get_messages_mid_stream_hides_partial_marker(stdout):
    gate = asyncio.Event()

    class GatedClient(FakeChatClient):
        async def stream(self, request):
            yield "Answer.\n<!--QUE"
            await gate.wait()
            yield 'STIONS:["Why?"]-->'

    explorer = _explorer(chat=GatedClient())
    task = asyncio.create_task(explorer.explore("history"))
    for _ in range(3):
        await asyncio.sleep(0)

    rpc._handle_get_messages(explorer, {"id": "m"})
    gate.set()
    await task

    response = _lines(stdout)[-1]
    assert response["command"] == "get_messages"
    assert [message["content"] for message in response["data"]["messages"]] == ["Answer."]
    assert explorer.chat.latest_suggested_questions() == ["Why?"]
