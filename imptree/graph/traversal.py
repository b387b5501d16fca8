"""
Traversal utilities for built import graphs.

These functions only follow child links from a root, so nodes detached by
remove_node_recursively are no longer visited.
"""

from typing import Iterator, Optional
import networkx as nx

from imptree.models import GraphNode


def iter_nodes(root: GraphNode) -> Iterator[GraphNode]:
    """
    Iterate over every node reachable from root, once each.

    Nodes are yielded depth-first in pre-order, children in list order.

    Args:
        root: Node to start from

    Yields:
        Each reachable GraphNode, root first
    """
    seen: set[int] = set()
    stack = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        stack.extend(reversed(node.children))


def find_node(root: GraphNode, identifier: str) -> Optional[GraphNode]:
    """Return the reachable node with the given identifier, or None."""
    for node in iter_nodes(root):
        if node.identifier == identifier:
            return node
    return None


def is_consistent(root: GraphNode) -> bool:
    """
    Check the link invariants of every node reachable from root.

    Returns:
        True if no list holds a node twice and every child link has a
        matching parent link (and vice versa)
    """
    for node in iter_nodes(root):
        if len({id(c) for c in node.children}) != len(node.children):
            return False
        if len({id(p) for p in node.parents}) != len(node.parents):
            return False
        if any(not any(p is node for p in child.parents) for child in node.children):
            return False
        if any(not any(c is node for c in parent.children) for parent in node.parents):
            return False
    return True


def to_networkx(root: GraphNode) -> nx.DiGraph:
    """
    Export the graph reachable from root as a NetworkX DiGraph.

    Graph nodes are identifiers; edges point from importer to imported.
    Each graph node carries the GraphNode under the "node" attribute.

    Example:
        >>> graph = to_networkx(root)
        >>> nx.is_directed_acyclic_graph(graph)
        True
    """
    graph = nx.DiGraph()
    for node in iter_nodes(root):
        graph.add_node(node.identifier, node=node)
        for child in node.children:
            graph.add_edge(node.identifier, child.identifier)
    return graph
