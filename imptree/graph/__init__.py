"""
Graph module for imptree.

This module provides construction of the doubly-linked import graph,
cascading node removal, traversal helpers and include predicates.
"""

from imptree.graph.builder import (
    GraphBuilder,
    build_graph,
    remove_node_recursively,
)
from imptree.graph.predicates import (
    all_of,
    exclude_external,
    include_all,
    within,
)
from imptree.graph.traversal import (
    find_node,
    is_consistent,
    iter_nodes,
    to_networkx,
)

__all__ = [
    "GraphBuilder",
    "build_graph",
    "remove_node_recursively",
    "all_of",
    "exclude_external",
    "include_all",
    "within",
    "find_node",
    "is_consistent",
    "iter_nodes",
    "to_networkx",
]
