"""API routes for socrates.

Provides:
- POST /api/generate: synthesize child topics for a node (JSON)
- POST /api/chat: stream a chat reply about a node (text/event-stream)
- GET /api/health
"""

import json
import logging
from typing import AsyncIterator, List, Literal, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from socrates_ai.auth import resolve_api_key
from socrates_ai.models import get_model
from socrates_ai.sse import DONE_FRAME, encode_text_frame
from socrates_ai.streaming import ReplyEvent
from socrates_ai.types import ChatTurn, Context, StreamOptions
from socrates_graph.types import GenerateResponse, Node

from .prompts import (
    build_chat_message,
    build_generate_system_prompt,
    build_generate_user_prompt,
    chat_system_prompt,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CHAT_UNAVAILABLE_MESSAGE = "The library is currently closed for reorganization. (API Error)"


# ============================================================================
# Request Models
# ============================================================================


class GenerateRequest(BaseModel):
    """Body of POST /api/generate."""

    model_config = ConfigDict(populate_by_name=True)

    parent_node: Node = Field(alias="parentNode")
    path_history: List[str] = Field(default_factory=list, alias="pathHistory")
    exclude_titles: List[str] = Field(default_factory=list, alias="excludeTitles")


class HistoryMessage(BaseModel):
    role: Literal["user", "model"]
    content: str


class ChatRequest(BaseModel):
    """Body of POST /api/chat."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    node_title: str = Field(alias="nodeTitle")
    ancestry_path: List[str] = Field(default_factory=list, alias="ancestryPath")
    mode: Literal["explore", "chat"] = "chat"
    history: List[HistoryMessage] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    openai_configured: bool
    google_configured: bool


# ============================================================================
# Routes
# ============================================================================


@router.get("/api/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    settings = request.app.state.settings
    return HealthResponse(
        status="ok",
        openai_configured=bool(settings.openai_api_key),
        google_configured=bool(settings.google_api_key),
    )


@router.post("/api/generate")
async def generate(body: GenerateRequest, request: Request) -> JSONResponse:
    settings = request.app.state.settings
    stream_fn = request.app.state.stream_fn
    parent = body.parent_node

    logger.info(f"Generate called for {parent.title!r} (exclude {len(body.exclude_titles)} titles)")

    try:
        api_key = resolve_api_key("openai", settings.openai_api_key)
        model = get_model("openai", settings.generate_model).model_copy(
            update={"base_url": settings.openai_base_url}
        )
        context = Context(
            system_prompt=build_generate_system_prompt(settings.children_per_page),
            messages=[
                ChatTurn(
                    role="user",
                    content=build_generate_user_prompt(
                        parent,
                        body.path_history,
                        body.exclude_titles,
                        settings.children_per_page,
                    ),
                )
            ],
        )
        options = StreamOptions(
            api_key=api_key,
            temperature=settings.generate_temperature,
            response_format="json_object",
            timeout=settings.generate_timeout,
            on_payload=lambda payload: logger.debug(f"Generate payload: {json.dumps(payload)[:2000]}"),
        )

        reply = await stream_fn(model, context, options).result()
        if reply.stop_reason == "error":
            raise RuntimeError(reply.error_message or "Provider request failed")
        if not reply.text:
            raise RuntimeError("No content generated")

        parsed = GenerateResponse.model_validate(json.loads(reply.text))
        children = parsed.children[: settings.children_per_page]
        if not children:
            raise RuntimeError("No children generated")
        logger.info(f"Generated {len(children)} children for {parent.title!r}")
        return JSONResponse({"children": [child.model_dump(exclude_none=True) for child in children]})

    except Exception as exc:
        logger.exception("Generation error")
        return JSONResponse({"error": str(exc) or "Failed to generate nodes"}, status_code=500)


@router.post("/api/chat")
async def chat(body: ChatRequest, request: Request):
    settings = request.app.state.settings
    stream_fn = request.app.state.stream_fn

    logger.info(f"Chat called (mode: {body.mode}, streaming) for {body.node_title!r}")
    logger.debug(f"Ancestry path: {body.ancestry_path}")

    try:
        api_key = resolve_api_key("google", settings.google_api_key)
        model = get_model("google", settings.chat_model).model_copy(
            update={"base_url": settings.gemini_base_url}
        )
        turns = [ChatTurn(role=turn.role, content=turn.content) for turn in body.history if turn.content]
        turns.append(
            ChatTurn(
                role="user",
                content=build_chat_message(body.mode, body.message, body.node_title, body.ancestry_path),
            )
        )
        context = Context(system_prompt=chat_system_prompt(body.mode), messages=turns)
        options = StreamOptions(api_key=api_key, timeout=settings.chat_timeout)

        events = stream_fn(model, context, options)
        first = await events.first()
        if first is not None and first.get("type") == "error":
            raise RuntimeError(first["reply"].error_message or "Provider stream failed")

    except Exception:
        logger.exception("Chat error")
        return JSONResponse({"error": CHAT_UNAVAILABLE_MESSAGE}, status_code=500)

    return StreamingResponse(
        _sse_frames(first, events),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


async def _sse_frames(first: Optional[ReplyEvent], events: AsyncIterator[ReplyEvent]) -> AsyncIterator[str]:
    async def chained() -> AsyncIterator[ReplyEvent]:
        if first is not None:
            yield first
        async for event in events:
            yield event

    async for event in chained():
        event_type = event.get("type")
        if event_type == "text_delta":
            yield encode_text_frame(event["delta"])
        elif event_type == "done":
            yield DONE_FRAME
            return
        elif event_type == "error":
            logger.error(f"Stream error: {event['reply'].error_message}")
            return
