"""In-memory node cache with paged children."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence

from .types import GeneratedChild, Node


def allocate_child_id(parent_id: str, page_index: int, position: int, taken: Optional[Dict[str, Node]] = None) -> str:
    """Derive a child id from its parent, page, and position.

    A numeric suffix is appended when the derived id is already in ``taken``.
    """
    base = f"{parent_id}_p{page_index}_{position}"
    if not taken or base not in taken:
        return base
    suffix = 1
    while f"{base}_{suffix}" in taken:
        suffix += 1
    return f"{base}_{suffix}"


class NodeCache:
    """Mapping from node id to :class:`Node`.

    Nodes are added once. After that only a parent's children lists change,
    and only by appending a page.
    """

    def __init__(self, nodes: Optional[Dict[str, Node]] = None) -> None:
        self._nodes: Dict[str, Node] = dict(nodes or {})

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def get(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def require(self, node_id: str) -> Node:
        node = self._nodes.get(node_id)
        if node is None:
            raise KeyError(f"Node not found: {node_id}")
        return node

    def add(self, node: Node) -> None:
        if node.id in self._nodes:
            raise ValueError(f"Node already exists: {node.id}")
        self._nodes[node.id] = node

    def children_of(self, node_id: str) -> List[Node]:
        node = self._nodes.get(node_id)
        if node is None:
            return []
        return [self._nodes[child_id] for child_id in node.children_ids if child_id in self._nodes]

    def page_children(self, node_id: str, page_index: int) -> List[Node]:
        node = self._nodes.get(node_id)
        if node is None:
            return []
        pages = node.pages()
        if not 0 <= page_index < len(pages):
            return []
        return [self._nodes[child_id] for child_id in pages[page_index] if child_id in self._nodes]

    def child_titles(self, node_id: str) -> List[str]:
        return [child.title for child in self.children_of(node_id)]

    def append_page(self, parent_id: str, children: Sequence[GeneratedChild]) -> List[str]:
        """Create child nodes for ``children`` and store them as the parent's next page.

        Returns the ids of the new page, in response order. Empty pages are
        rejected so a node only stops being a leaf once it has real children.
        """
        if not children:
            raise ValueError(f"Refusing to append an empty page to {parent_id}")
        parent = self.require(parent_id)
        if not parent.children_pages and parent.children_ids:
            parent.children_pages = [list(parent.children_ids)]

        page_index = len(parent.children_pages)
        page_ids: List[str] = []
        for position, child in enumerate(children):
            child_id = allocate_child_id(parent_id, page_index, position, self._nodes)
            self.add(
                Node(
                    id=child_id,
                    title=child.title,
                    hook=child.hook,
                    is_static=False,
                    llm_config=child.llm_config,
                    popup_data=child.popup_data,
                )
            )
            page_ids.append(child_id)

        parent.children_pages.append(page_ids)
        parent.children_ids = [child_id for page in parent.children_pages for child_id in page]
        return page_ids

    def to_dict(self) -> Dict[str, dict]:
        return {node_id: node.to_wire() for node_id, node in self._nodes.items()}
