"""Per-node page cursors over generated children."""

from __future__ import annotations

from typing import Dict

from .types import Node, PageInfo


class PageCursor:
    def __init__(self) -> None:
        self._cursors: Dict[str, int] = {}

    def get(self, node: Node) -> int:
        total = len(node.pages())
        if total == 0:
            return 0
        return min(self._cursors.get(node.id, 0), total - 1)

    def set(self, node: Node, page_index: int) -> int:
        """Move the cursor, clamped into the node's page range."""
        total = len(node.pages())
        clamped = max(0, min(page_index, total - 1)) if total else 0
        self._cursors[node.id] = clamped
        return clamped

    def page_info(self, node: Node) -> PageInfo:
        total = len(node.pages())
        if total == 0:
            return PageInfo(current=0, total=0, has_children=False)
        return PageInfo(current=self.get(node) + 1, total=total, has_children=True)

    def to_dict(self) -> Dict[str, int]:
        return dict(self._cursors)
