"""Knowledge-graph state for socrates."""

from .cache import NodeCache, allocate_child_id
from .client import GenerationClient, HttpGenerationClient
from .store import GraphState, GraphStore
from .taxonomy import initialize_nodes, load_taxonomy, root_ids
from .types import Err, GeneratedChild, Node, Ok, PageInfo
from .view import GraphRow, build_rows

__all__ = [
    "Err",
    "GeneratedChild",
    "GenerationClient",
    "GraphRow",
    "GraphState",
    "GraphStore",
    "HttpGenerationClient",
    "Node",
    "NodeCache",
    "Ok",
    "PageInfo",
    "allocate_child_id",
    "build_rows",
    "initialize_nodes",
    "load_taxonomy",
    "root_ids",
]
