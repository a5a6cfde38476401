import pytest

from socrates_ai.auth import resolve_api_key
from socrates_ai.sse import (
    DONE_FRAME,
    encode_data_frame,
    encode_text_frame,
    is_done,
    read_data_line,
    sanitize_surrogates,
)
from socrates_ai.streaming import ReplyEventStream
from tests.helpers import create_error_stream, create_reply, create_text_stream


def test_text_frame_format():
    assert encode_text_frame("hi") == 'data: {"text": "hi"}\n\n'
    assert encode_data_frame({"error": "x"}) == 'data: {"error": "x"}\n\n'
    assert DONE_FRAME == "data: [DONE]\n\n"


def test_read_data_line():
    assert read_data_line('data: {"text": "a"}') == '{"text": "a"}'
    assert read_data_line("data:[DONE]") == "[DONE]"
    assert read_data_line("") is None
    assert read_data_line(": keepalive") is None
    assert is_done("[DONE]")
    assert not is_done('{"text": "[DONE]"}')


def test_sanitize_surrogates_drops_lone_halves():
    assert sanitize_surrogates("ok\ud83dtext") == "oktext"
    assert sanitize_surrogates("emoji 🙂") == "emoji 🙂"


def test_resolve_api_key(no_api_keys, monkeypatch):
    with pytest.raises(RuntimeError):
        resolve_api_key("openai")
    assert resolve_api_key("openai", "explicit") == "explicit"
    monkeypatch.setenv("GOOGLE_API_KEY", "from-env")
    assert resolve_api_key("google") == "from-env"


@pytest.mark.asyncio
async def test_stream_result_and_deltas():
    stream = create_text_stream(["a", "b"])
    assert [delta async for delta in stream.text_deltas()] == ["a", "b"]
    assert (await stream.result()).text == "ab"


@pytest.mark.asyncio
async def test_error_stream_raises_from_text_deltas():
    stream = create_error_stream("quota exceeded")
    with pytest.raises(RuntimeError, match="quota exceeded"):
        async for _ in stream.text_deltas():
            pass


@pytest.mark.asyncio
async def test_push_after_end_is_ignored():
    stream = ReplyEventStream()
    reply = create_reply("done")
    stream.push({"type": "done", "reason": "stop", "reply": reply})
    stream.end(reply)
    stream.push({"type": "text_delta", "delta": "late"})

    events = [event async for event in stream]
    assert [event["type"] for event in events] == ["done"]


@pytest.mark.asyncio
async def test_events_after_terminal_event_are_dropped():
    stream = ReplyEventStream()
    reply = create_reply("done")
    stream.push({"type": "done", "reason": "stop", "reply": reply})
    stream.push({"type": "error", "reason": "error", "reply": create_reply("late")})
    stream.end()

    assert stream.finished
    assert [event["type"] async for event in stream] == ["done"]
    assert (await stream.result()).text == "done"


@pytest.mark.asyncio
async def test_first_returns_next_event_and_keeps_the_rest():
    stream = create_text_stream(["a", "b"])

    first = await stream.first()

    assert first["type"] == "start"
    assert [delta async for delta in stream.text_deltas()] == ["a", "b"]
    assert await stream.first() is None
