import json

import httpx
import pytest

from socrates_ai.models import create_gemini_model, create_openai_model, get_model
from socrates_ai.providers import gemini as gemini_provider
from socrates_ai.providers import openai as openai_provider
from socrates_ai.stream import complete, stream
from socrates_ai.types import ChatTurn, Context, StreamOptions


def _context():
    return Context(
        system_prompt="Be brief.",
        messages=[
            ChatTurn(role="user", content="Tell me about atoms"),
            ChatTurn(role="model", content="Atoms are small."),
            ChatTurn(role="user", content="How small?"),
        ],
    )


def _patch_transport(monkeypatch, handler):
    real_client = httpx.AsyncClient
    transport = httpx.MockTransport(handler)

    def factory(**kwargs):
        return real_client(transport=transport, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", factory)


def test_openai_params_map_roles_and_json_mode():
    model = create_openai_model("gpt-4o-mini")
    options = StreamOptions(max_tokens=512, temperature=0.7, response_format="json_object")

    params = openai_provider._build_params(model, _context(), options)

    assert params["model"] == "gpt-4o-mini"
    assert params["stream"] is True
    assert [message["role"] for message in params["messages"]] == ["system", "user", "assistant", "user"]
    assert params["max_completion_tokens"] == 512
    assert params["temperature"] == 0.7
    assert params["response_format"] == {"type": "json_object"}


def test_openai_url_variants():
    assert openai_provider._build_url("https://api.openai.com/v1") == "https://api.openai.com/v1/chat/completions"
    assert openai_provider._build_url("http://proxy") == "http://proxy/v1/chat/completions"
    assert openai_provider._build_url("http://x/v1/chat/completions/") == "http://x/v1/chat/completions"


def test_gemini_params_use_contents_and_system_instruction():
    options = StreamOptions(max_tokens=256, response_format="json_object")

    params = gemini_provider._build_params(create_gemini_model("gemini-2.5-flash-lite"), _context(), options)

    assert [content["role"] for content in params["contents"]] == ["user", "model", "user"]
    assert params["contents"][0]["parts"] == [{"text": "Tell me about atoms"}]
    assert params["systemInstruction"] == {"parts": [{"text": "Be brief."}]}
    assert params["generationConfig"] == {"maxOutputTokens": 256, "responseMimeType": "application/json"}


def test_gemini_params_without_options_have_no_generation_config():
    model = create_gemini_model("gemini-2.5-flash-lite")
    params = gemini_provider._build_params(model, Context(messages=[ChatTurn(role="user", content="hi")]), None)
    assert "generationConfig" not in params
    assert "systemInstruction" not in params


def test_stop_reason_mapping():
    assert openai_provider._map_stop_reason("length") == "length"
    assert openai_provider._map_stop_reason("content_filter") == "safety"
    assert gemini_provider._map_stop_reason("MAX_TOKENS") == "length"
    assert gemini_provider._map_stop_reason("SAFETY") == "safety"
    assert gemini_provider._map_stop_reason("STOP") == "stop"


def test_get_model_creates_unknown_models_on_known_providers():
    assert get_model("google", "gemini-2.5-flash-lite").api == "gemini-generate-content"
    assert get_model("openai", "gpt-test").api == "openai-completions"
    with pytest.raises(KeyError):
        get_model("nobody", "x")


@pytest.mark.asyncio
async def test_openai_stream_accumulates_deltas(monkeypatch):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        frames = [
            {"choices": [{"delta": {"content": "Hel"}}]},
            {"choices": [{"delta": {"content": "lo"}, "finish_reason": "stop"}]},
        ]
        body = "".join(f"data: {json.dumps(frame)}\n\n" for frame in frames) + "data: [DONE]\n\n"
        return httpx.Response(200, text=body)

    _patch_transport(monkeypatch, handler)
    model = create_openai_model("gpt-4o-mini", base_url="http://openai.test/v1")

    events = [event async for event in stream(model, _context(), StreamOptions(api_key="sk-x"))]

    assert [event["type"] for event in events] == ["start", "text_delta", "text_delta", "done"]
    assert events[-1]["reply"].text == "Hello"
    assert seen["url"] == "http://openai.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-x"
    assert seen["body"]["stream"] is True


@pytest.mark.asyncio
async def test_gemini_stream_skips_thought_parts(monkeypatch):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers["x-goog-api-key"]
        frames = [
            {"candidates": [{"content": {"parts": [{"text": "thinking", "thought": True}]}}]},
            {"candidates": [{"content": {"parts": [{"text": "Atoms "}]}}]},
            {"candidates": [{"content": {"parts": [{"text": "are tiny."}]}, "finishReason": "STOP"}]},
        ]
        return httpx.Response(200, text="".join(f"data: {json.dumps(frame)}\n\n" for frame in frames))

    _patch_transport(monkeypatch, handler)
    model = create_gemini_model("gemini-2.5-flash-lite", base_url="http://gemini.test/v1beta")

    deltas = [delta async for delta in stream(model, _context(), StreamOptions(api_key="g-x")).text_deltas()]

    assert deltas == ["Atoms ", "are tiny."]
    assert seen["url"] == "http://gemini.test/v1beta/models/gemini-2.5-flash-lite:streamGenerateContent?alt=sse"
    assert seen["key"] == "g-x"


@pytest.mark.asyncio
async def test_http_error_becomes_error_reply(monkeypatch):
    _patch_transport(monkeypatch, lambda request: httpx.Response(429, json={"error": "quota"}))
    model = create_openai_model("gpt-4o-mini")

    reply = await complete(model, _context(), StreamOptions(api_key="sk-x"))

    assert reply.stop_reason == "error"
    assert "429" in reply.error_message


@pytest.mark.asyncio
async def test_missing_api_key_is_error_reply(no_api_keys):
    model = create_gemini_model("gemini-2.5-flash-lite")

    response = stream(model, _context())
    with pytest.raises(RuntimeError, match="No API key"):
        async for _ in response.text_deltas():
            pass


def test_model_max_tokens_is_the_default_limit():
    openai_model = create_openai_model("gpt-4o-mini", max_tokens=16384)
    gemini_model = create_gemini_model("gemini-2.5-flash-lite", max_tokens=8192)

    assert openai_provider._build_params(openai_model, _context(), None)["max_completion_tokens"] == 16384
    assert gemini_provider._build_params(gemini_model, _context(), None)["generationConfig"] == {
        "maxOutputTokens": 8192
    }
    override = StreamOptions(max_tokens=100)
    assert openai_provider._build_params(openai_model, _context(), override)["max_completion_tokens"] == 100


def test_builtin_models_carry_token_limits():
    assert get_model("openai", "gpt-4o-mini").max_tokens == 16384
    assert get_model("google", "gemini-2.5-flash-lite").max_tokens == 8192
