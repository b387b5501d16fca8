"""
imptree

Builds a doubly-linked import graph for a Python module: every node knows
the modules it imports and the modules importing it. Nodes can be removed
with their no-longer-imported descendants.
"""

from imptree.config import LoadConfig
from imptree.errors import (
    AmbiguousRootError,
    BuilderReusedError,
    ImpTreeError,
    LoadFailureError,
    ManifestError,
    RootNotFoundError,
)
from imptree.graph import GraphBuilder, build_graph, remove_node_recursively
from imptree.models import GraphNode, MatchUnit, SourceUnit

__all__ = [
    "LoadConfig",
    "AmbiguousRootError",
    "BuilderReusedError",
    "ImpTreeError",
    "LoadFailureError",
    "ManifestError",
    "RootNotFoundError",
    "GraphBuilder",
    "build_graph",
    "remove_node_recursively",
    "GraphNode",
    "MatchUnit",
    "SourceUnit",
]
__version__ = "0.1.0"
