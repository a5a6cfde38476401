"""View-model for the graph: one row of cards per depth."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from .store import GraphStore
from .types import Node, PageInfo

CardState = Literal["active", "sibling-active", "neutral"]


@dataclass
class Card:
    node: Node
    state: CardState

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.node.id,
            "title": self.node.title,
            "hook": self.node.hook,
            "state": self.state,
        }


@dataclass
class GraphRow:
    depth: int
    parent_id: Optional[str]
    cards: List[Card]
    page_info: Optional[PageInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "depth": self.depth,
            "parentId": self.parent_id,
            "cards": [card.to_dict() for card in self.cards],
        }
        if self.page_info is not None:
            data["pageInfo"] = {
                "current": self.page_info.current,
                "total": self.page_info.total,
                "hasChildren": self.page_info.has_children,
            }
        return data


def card_state(active_path: List[str], depth: int, node_id: str) -> CardState:
    if depth < len(active_path):
        return "active" if active_path[depth] == node_id else "sibling-active"
    return "neutral"


def build_rows(store: GraphStore) -> List[GraphRow]:
    """Roots first, then the visible page of children under each selected node."""
    active_path = store.state.active_path
    rows: List[GraphRow] = []

    def make_row(parent_id: Optional[str], nodes: List[Node], page_info: Optional[PageInfo]) -> GraphRow:
        depth = len(rows)
        cards = [Card(node=node, state=card_state(active_path, depth, node.id)) for node in nodes]
        return GraphRow(depth=depth, parent_id=parent_id, cards=cards, page_info=page_info)

    rows.append(make_row(None, store.root_nodes(), None))

    for node_id in active_path:
        children = store.get_visible_children(node_id)
        if not children:
            break
        rows.append(make_row(node_id, children, store.get_node_page_info(node_id)))

    return rows
