"""Graph store: active path, node cache, pagination, and child generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .cache import NodeCache
from .client import GenerationClient
from .pagination import PageCursor
from .types import Err, Node, PageInfo

logger = logging.getLogger(__name__)

GraphEvent = Dict[str, Any]

DEFAULT_MAX_PAGES_PER_NODE = 10


@dataclass
class GraphState:
    active_path: List[str] = field(default_factory=list)
    fetching_ids: set[str] = field(default_factory=set)
    loading_ids: set[str] = field(default_factory=set)
    last_error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return bool(self.loading_ids)


class GraphStore:
    """Owns the explorable tree for one process.

    Generation runs at most once at a time per parent id. Results are merged
    as a new page on the parent; failures leave the parent untouched.
    """

    def __init__(
        self,
        cache: NodeCache,
        client: GenerationClient,
        *,
        root_ids: Optional[List[str]] = None,
        max_pages_per_node: int = DEFAULT_MAX_PAGES_PER_NODE,
    ) -> None:
        self._cache = cache
        self._client = client
        self._root_ids = list(root_ids or [])
        self._max_pages_per_node = max_pages_per_node
        self._cursor = PageCursor()
        self._state = GraphState()
        self._listeners: set[Callable[[GraphEvent], None]] = set()

    @property
    def state(self) -> GraphState:
        return self._state

    @property
    def cache(self) -> NodeCache:
        return self._cache

    @property
    def root_ids(self) -> List[str]:
        return list(self._root_ids)

    def subscribe(self, fn: Callable[[GraphEvent], None]) -> Callable[[], None]:
        self._listeners.add(fn)

        def unsubscribe() -> None:
            self._listeners.discard(fn)

        return unsubscribe

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._cache.get(node_id)

    def root_nodes(self) -> List[Node]:
        return [node for node in (self._cache.get(root_id) for root_id in self._root_ids) if node]

    def path_history(self) -> List[str]:
        titles: List[str] = []
        for node_id in self._state.active_path:
            node = self._cache.get(node_id)
            if node is not None:
                titles.append(node.title)
        return titles

    def ancestry_of(self, node_id: str) -> List[str]:
        """Titles of the active-path entries above ``node_id``.

        A node that is not on the active path gets the whole path.
        """
        path = self._state.active_path
        cut = path.index(node_id) if node_id in path else len(path)
        titles: List[str] = []
        for ancestor_id in path[:cut]:
            ancestor = self._cache.get(ancestor_id)
            if ancestor is not None:
                titles.append(ancestor.title)
        return titles

    async def select_node(self, node_id: str, depth: int) -> None:
        logger.info(f"Selected {node_id} at depth {depth}")
        self._state.active_path = self._state.active_path[:depth] + [node_id]
        self._emit({"type": "path_changed", "active_path": list(self._state.active_path)})

        node = self._cache.get(node_id)
        if node is None:
            logger.warning(f"Selected unknown node {node_id}")
            return
        if node.has_children:
            logger.debug(f"Cache hit for {node_id}")
            return
        await self.generate_children(node)

    async def generate_children(self, parent: Node, silent: bool = False) -> None:
        await self._generate(parent, exclude_titles=None, silent=silent)

    async def generate_more_children(self, node_id: str) -> None:
        node = self._cache.get(node_id)
        if node is None:
            logger.warning(f"Cannot generate more children for unknown node {node_id}")
            return
        if len(node.pages()) >= self._max_pages_per_node:
            logger.warning(f"{node_id} already has {self._max_pages_per_node} pages; not generating more")
            return

        page_ids = await self._generate(node, exclude_titles=self._cache.child_titles(node_id), silent=False)
        if page_ids is not None:
            self.set_node_page(node_id, len(node.pages()) - 1)

    def get_node_children(self, node_id: str) -> List[Node]:
        return self._cache.children_of(node_id)

    def get_visible_children(self, node_id: str) -> List[Node]:
        node = self._cache.get(node_id)
        if node is None:
            return []
        return self._cache.page_children(node_id, self._cursor.get(node))

    def get_node_page_info(self, node_id: str) -> PageInfo:
        node = self._cache.get(node_id)
        if node is None:
            return PageInfo(current=0, total=0, has_children=False)
        return self._cursor.page_info(node)

    def set_node_page(self, node_id: str, page_index: int) -> None:
        node = self._cache.require(node_id)
        current = self._cursor.set(node, page_index)
        self._emit({"type": "page_changed", "node_id": node_id, "page": current})

    async def _generate(
        self,
        parent: Node,
        *,
        exclude_titles: Optional[List[str]],
        silent: bool,
    ) -> Optional[List[str]]:
        if parent.id in self._state.fetching_ids:
            logger.debug(f"Generation already in flight for {parent.id}")
            return None

        self._state.fetching_ids.add(parent.id)
        if not silent:
            self._state.loading_ids.add(parent.id)
        self._emit({"type": "generation_start", "node_id": parent.id})

        try:
            logger.info(f"Generating children for {parent.id} ({parent.title})")
            result = await self._client.generate(parent, self.path_history(), exclude_titles)
            if not isinstance(result, Err) and not result.children:
                result = Err("No children generated")
            if isinstance(result, Err):
                logger.error(f"Generation failed for {parent.id}: {result.reason}")
                self._state.last_error = result.reason
                self._emit({"type": "generation_error", "node_id": parent.id, "error": result.reason})
                return None

            page_ids = self._cache.append_page(parent.id, result.children)
            self._state.last_error = None
            logger.info(f"Added {len(page_ids)} children to {parent.id}")
            self._emit({"type": "children_added", "node_id": parent.id, "page_ids": page_ids})
            return page_ids
        except Exception as exc:
            logger.exception(f"Generation failed for {parent.id}")
            self._state.last_error = str(exc)
            self._emit({"type": "generation_error", "node_id": parent.id, "error": str(exc)})
            return None
        finally:
            self._state.fetching_ids.discard(parent.id)
            self._state.loading_ids.discard(parent.id)
            self._emit({"type": "generation_end", "node_id": parent.id})

    def _emit(self, event: GraphEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
