"""SDK entry points for embedding the socrates explorer."""

from __future__ import annotations

import logging
from typing import Optional

from socrates_chat.client import ChatClient, HttpChatClient
from socrates_chat.manager import ChatSessionManager
from socrates_chat.types import ChatMessage
from socrates_graph.cache import NodeCache
from socrates_graph.client import GenerationClient, HttpGenerationClient
from socrates_graph.store import GraphStore
from socrates_graph.taxonomy import initialize_nodes, load_taxonomy, root_ids
from socrates_graph.types import TaxonomyData
from socrates_graph.view import GraphRow, build_rows
from socrates_server.config import Settings

logger = logging.getLogger(__name__)


class Explorer:
    """The process-wide explorer state: the graph store plus chat sessions."""

    def __init__(self, graph: GraphStore, chat: ChatSessionManager) -> None:
        self.graph = graph
        self.chat = chat

    async def select(self, node_id: str, depth: int) -> None:
        await self.graph.select_node(node_id, depth)

    async def more(self, node_id: str) -> None:
        await self.graph.generate_more_children(node_id)

    def set_page(self, node_id: str, page_index: int) -> None:
        self.graph.set_node_page(node_id, page_index)

    def rows(self) -> list[GraphRow]:
        return build_rows(self.graph)

    async def explore(self, node_id: str, open_chat: bool = True) -> Optional[ChatMessage]:
        node = self.graph.cache.require(node_id)
        return await self.chat.trigger_chat(
            node.id,
            node.title,
            "explore",
            open_chat=open_chat,
            ancestry_path=self.graph.ancestry_of(node_id),
        )

    async def ask(self, node_id: str, question: str) -> Optional[ChatMessage]:
        node = self.graph.cache.require(node_id)
        return await self.chat.trigger_chat(
            node.id,
            node.title,
            "chat",
            specific_question=question,
            ancestry_path=self.graph.ancestry_of(node_id),
        )

    async def send(self, text: str) -> Optional[ChatMessage]:
        return await self.chat.send_message(text)


def create_explorer(
    *,
    settings: Optional[Settings] = None,
    taxonomy: Optional[TaxonomyData] = None,
    generation_client: Optional[GenerationClient] = None,
    chat_client: Optional[ChatClient] = None,
) -> Explorer:
    resolved = settings or Settings()
    resolved_taxonomy = taxonomy or load_taxonomy(resolved.taxonomy_path)

    graph = GraphStore(
        NodeCache(initialize_nodes(resolved_taxonomy)),
        generation_client
        or HttpGenerationClient(resolved.api_base_url, timeout=resolved.generate_timeout),
        root_ids=root_ids(resolved_taxonomy),
        max_pages_per_node=resolved.max_pages_per_node,
    )
    chat = ChatSessionManager(
        chat_client or HttpChatClient(resolved.api_base_url, timeout=resolved.chat_timeout)
    )
    logger.debug(f"Explorer wired to {resolved.api_base_url}")
    return Explorer(graph, chat)
