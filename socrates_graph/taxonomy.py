"""Static seed taxonomy: the root topics the explorer starts from."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from .types import Node, PopupData, TaxonomyData

logger = logging.getLogger(__name__)

DEFAULT_TAXONOMY_PATH = Path(__file__).resolve().parent / "data" / "taxonomy.json"


def load_taxonomy(path: Optional[str | Path] = None) -> TaxonomyData:
    source = Path(path) if path else DEFAULT_TAXONOMY_PATH
    with source.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    taxonomy = TaxonomyData.model_validate(data)
    logger.info(f"Loaded {len(taxonomy.roots)} root topics from {source}")
    return taxonomy


def initialize_nodes(taxonomy: TaxonomyData) -> Dict[str, Node]:
    """Build the initial node map: every root plus its seeded children."""
    node_map: Dict[str, Node] = {}
    for root in taxonomy.roots:
        root_children_ids: List[str] = []
        for child in root.children:
            node_map[child.id] = child.model_copy(
                update={"children_ids": [], "children_pages": [], "is_static": True}
            )
            root_children_ids.append(child.id)

        node_map[root.id] = Node(
            id=root.id,
            title=root.title,
            hook=root.hook,
            children_ids=root_children_ids,
            is_static=True,
            popup_data=root.popup_data
            or PopupData(
                description=root.description or root.hook,
                questions=list(root.questions or []),
            ),
        )
    return node_map


def root_ids(taxonomy: TaxonomyData) -> List[str]:
    return [root.id for root in taxonomy.roots]
