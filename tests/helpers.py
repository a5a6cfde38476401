"""Test helpers for socrates."""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from socrates_ai.streaming import ReplyEventStream
from socrates_ai.types import ModelReply
from socrates_graph.cache import NodeCache
from socrates_graph.store import GraphStore
from socrates_graph.taxonomy import initialize_nodes, root_ids
from socrates_graph.types import (
    Err,
    GeneratedChild,
    GenerationResult,
    LLMConfig,
    Node,
    Ok,
    PopupData,
    TaxonomyData,
    TaxonomyRoot,
)


def create_child(title: str) -> GeneratedChild:
    return GeneratedChild(
        title=title,
        hook=f"Why {title} matters",
        llm_config=LLMConfig(definition=f"Parts of {title}", exclude="Siblings"),
        popup_data=PopupData(description=f"About {title}.", questions=[f"How does {title} work?"]),
    )


def create_children(*titles: str) -> List[GeneratedChild]:
    return [create_child(title) for title in titles]


def create_taxonomy() -> TaxonomyData:
    return TaxonomyData(
        roots=[
            TaxonomyRoot(id="science", title="Science", hook="How the world works"),
            TaxonomyRoot(id="history", title="History", hook="How we got here", description="The past."),
            TaxonomyRoot(
                id="math",
                title="Mathematics",
                hook="Structure and proof",
                children=[
                    Node(id="math_algebra", title="Algebra", hook="Symbols"),
                    Node(id="math_geometry", title="Geometry", hook="Shapes"),
                ],
            ),
        ]
    )


class FakeGenerationClient:
    """Returns queued results; optionally blocks until ``release`` is set."""

    def __init__(self, results: Optional[Sequence[GenerationResult]] = None) -> None:
        self.results: List[GenerationResult] = list(results or [])
        self.calls: List[Dict[str, Any]] = []
        self.release: Optional[asyncio.Event] = None

    async def generate(
        self,
        parent: Node,
        path_history: Sequence[str],
        exclude_titles: Optional[Sequence[str]] = None,
    ) -> GenerationResult:
        self.calls.append(
            {
                "parent_id": parent.id,
                "path_history": list(path_history),
                "exclude_titles": list(exclude_titles) if exclude_titles else None,
            }
        )
        if self.release is not None:
            await self.release.wait()
        if not self.results:
            return Err("no result queued")
        return self.results.pop(0)


def ok(*titles: str) -> Ok:
    return Ok(children=create_children(*titles))


def create_store(
    client: Optional[FakeGenerationClient] = None,
    *,
    max_pages_per_node: int = 10,
) -> GraphStore:
    taxonomy = create_taxonomy()
    return GraphStore(
        NodeCache(initialize_nodes(taxonomy)),
        client or FakeGenerationClient(),
        root_ids=root_ids(taxonomy),
        max_pages_per_node=max_pages_per_node,
    )


class FakeChatClient:
    """Yields queued chunk lists per request; a queued exception is raised instead."""

    def __init__(self, replies: Optional[Sequence[Any]] = None) -> None:
        self.replies: List[Any] = list(replies or [])
        self.requests: List[Dict[str, Any]] = []

    async def stream(self, request: Dict[str, Any]) -> AsyncIterator[str]:
        self.requests.append(request)
        reply = self.replies.pop(0) if self.replies else ["ok"]
        if isinstance(reply, Exception):
            raise reply
        for chunk in reply:
            await asyncio.sleep(0)
            yield chunk


def create_reply(text: str, provider: str = "google", model: str = "mock") -> ModelReply:
    api = "openai-completions" if provider == "openai" else "gemini-generate-content"
    return ModelReply(text=text, api=api, provider=provider, model=model)


def create_text_stream(chunks: Sequence[str], provider: str = "google") -> ReplyEventStream:
    stream = ReplyEventStream()
    reply = create_reply("", provider=provider)
    stream.push({"type": "start", "partial": reply})
    for chunk in chunks:
        reply.text += chunk
        stream.push({"type": "text_delta", "delta": chunk, "partial": reply})
    stream.push({"type": "done", "reason": "stop", "reply": reply})
    stream.end(reply)
    return stream


def create_error_stream(message: str, provider: str = "google") -> ReplyEventStream:
    stream = ReplyEventStream()
    reply = create_reply("", provider=provider)
    reply.stop_reason = "error"
    reply.error_message = message
    stream.push({"type": "error", "reason": "error", "reply": reply})
    stream.end(reply)
    return stream
