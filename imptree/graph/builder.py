"""
Graph Builder for imptree

This module turns a loaded graph of SourceUnits into a doubly-linked graph
of GraphNodes: every node knows the modules it imports (children) and the
modules importing it (parents).

Design Decisions:
    - One GraphNode per identifier, enforced by the builder's node map
    - The node map is scratch state of one builder; a builder builds one
      graph and refuses a second build
    - The include predicate is evaluated once per identifier and excluded
      units end the walk, so their imports are never reached through them
    - Loader hooks are injectable so the builder can be tested with
      in-memory unit graphs

Graph Properties:
    - Directed: children are imports, parents are importers
    - May have cycles; the walk expands each identifier once
    - c in p.children iff p in c.parents, before and after removal
    - Exactly one node without parents when built from one root, unless
      the root itself sits on an import cycle
    - The walk recurses once per level of import depth, so a chain deeper
      than the interpreter recursion limit (about 1000 modules) raises
      RecursionError; removal uses an explicit stack and has no such limit
"""

import logging
from typing import Callable, Optional

from imptree.config import LoadConfig
from imptree.errors import (
    AmbiguousRootError,
    BuilderReusedError,
    LoadFailureError,
    RootNotFoundError,
)
from imptree.loader import count_load_errors, load_units
from imptree.models import GraphNode, MatchUnit, SourceUnit

logger = logging.getLogger(__name__)

LoadUnits = Callable[[str, LoadConfig], list[SourceUnit]]
CountLoadErrors = Callable[[list[SourceUnit]], int]


class GraphBuilder:
    """
    Builds the import graph rooted at one module.

    A GraphBuilder should not be reused for different graphs; instantiate
    a new one per graph, otherwise nodes of unrelated graphs would alias.

    Attributes:
        config: Loader options passed to the load hook
        nodes: Identifier -> GraphNode for every node materialized so far

    Usage:
        builder = GraphBuilder(LoadConfig(search_paths=[Path(".")]))
        root = builder.build("myapp.cli", within("myapp"))
        for child in root.children:
            print(child.identifier)
    """

    def __init__(
        self,
        config: Optional[LoadConfig] = None,
        *,
        load_units: LoadUnits = load_units,
        count_load_errors: CountLoadErrors = count_load_errors,
    ) -> None:
        """
        Initialize an unused builder.

        Args:
            config: Loader options; defaults to searching the current directory
            load_units: Hook loading the top-level units for an identifier
            count_load_errors: Hook reporting errors found while loading
        """
        self.config = config if config is not None else LoadConfig()
        self._load_units = load_units
        self._count_load_errors = count_load_errors
        self._nodes: dict[str, GraphNode] = {}
        self._included: dict[str, bool] = {}
        self._expanded: set[str] = set()
        self._used = False

    @property
    def nodes(self) -> dict[str, GraphNode]:
        """Access the identifier -> node map."""
        return self._nodes

    def build(self, root_identifier: str, include: MatchUnit) -> GraphNode:
        """
        Build the import graph and return its root node.

        Only units matched by include become nodes. A unit that is not
        matched is left out together with everything reachable only
        through it.

        Args:
            root_identifier: Dotted name of the module to start from
            include: Predicate selecting the units that take part

        Returns:
            The root GraphNode, which has no parents

        Raises:
            BuilderReusedError: If this builder has already built a graph
            LoadFailureError: If the load hook raised
            AmbiguousRootError: If the load reported errors or did not
                produce exactly one top-level unit
            RootNotFoundError: If include rejected every unit

        Example:
            >>> builder = GraphBuilder()
            >>> root = builder.build("acme.cli", lambda u: u.identifier.startswith("acme"))
            >>> root.identifier
            'acme.cli'
        """
        if self._used:
            raise BuilderReusedError("a GraphBuilder builds one graph; create a new builder")
        self._used = True

        try:
            units = self._load_units(root_identifier, self.config)
        except Exception as e:
            raise LoadFailureError("failed to load source package") from e

        units = list(units or [])
        if self._count_load_errors(units) > 0 or len(units) != 1:
            raise AmbiguousRootError(
                f"failed to load source package: {root_identifier!r} "
                f"produced {len(units)} top-level unit(s) or had load errors"
            )

        self._walk(units[0].identifier, units[0], include)
        root = self._find_root()

        logger.debug(
            "built graph for %s: %d nodes, %d edges",
            root_identifier,
            len(self._nodes),
            sum(len(node.children) for node in self._nodes.values()),
        )
        return root

    def _walk(self, identifier: str, unit: SourceUnit, include: MatchUnit) -> None:
        """
        Materialize unit under identifier and its included imports, depth-first.

        Nodes and expansion are keyed by the import-map key rather than
        unit.identifier, so a unit filed under another name still ends the
        walk once expanded.
        """
        if not self._matches(identifier, unit, include):
            return

        self._expanded.add(identifier)
        node = self._node_for(identifier)

        for child_identifier, child_unit in unit.imports.items():
            if not self._matches(child_identifier, child_unit, include):
                continue

            child = self._node_for(child_identifier)
            _link(node, child)

            if child_identifier not in self._expanded:
                self._walk(child_identifier, child_unit, include)

    def _matches(self, identifier: str, unit: SourceUnit, include: MatchUnit) -> bool:
        if identifier not in self._included:
            self._included[identifier] = bool(include(unit))
        return self._included[identifier]

    def _node_for(self, identifier: str) -> GraphNode:
        node = self._nodes.get(identifier)
        if node is None:
            node = GraphNode(identifier)
            self._nodes[identifier] = node
        return node

    def _find_root(self) -> GraphNode:
        """Follow first parents up from the first node until none is left."""
        if not self._nodes:
            raise RootNotFoundError("could not find tree root node")

        start = next(iter(self._nodes.values()))
        node = start
        seen = {node.identifier}
        while node.parents:
            node = node.parents[0]
            if node.identifier in seen:
                logger.warning(
                    "%s is part of an import cycle; using it as the root", start.identifier
                )
                return start
            seen.add(node.identifier)

        return node


def build_graph(
    root_identifier: str,
    include: MatchUnit,
    config: Optional[LoadConfig] = None,
) -> GraphNode:
    """
    Build an import graph with a fresh GraphBuilder.

    Args:
        root_identifier: Dotted name of the module to start from
        include: Predicate selecting the units that take part
        config: Loader options

    Returns:
        The root GraphNode
    """
    return GraphBuilder(config).build(root_identifier, include)


def remove_node_recursively(root: GraphNode, target: GraphNode) -> list[GraphNode]:
    """
    Detach a node from the graph, cascading to children left without parents.

    Children still imported by some other node keep their place and their
    own subtree. Removing an already detached node changes nothing.

    Args:
        root: Root of the graph the target belongs to
        target: Node to remove

    Returns:
        The detached nodes, target first; empty if nothing changed
    """
    removed: list[GraphNode] = []
    if target.parents or target.children:
        _detach(target, removed)
        logger.debug(
            "removed %d node(s) from graph rooted at %s", len(removed), root.identifier
        )
    return removed


def _detach(target: GraphNode, removed: list[GraphNode]) -> None:
    """Detach target, then every node left without parents, depth-first."""
    stack = [target]
    while stack:
        node = stack.pop()
        removed.append(node)

        for parent in node.parents:
            _discard(parent.children, node)
        node.parents.clear()

        children, node.children = node.children, []
        orphans = []
        for child in children:
            _discard(child.parents, node)
            if not child.parents:
                orphans.append(child)
        stack.extend(reversed(orphans))


def _link(parent: GraphNode, child: GraphNode) -> None:
    """Add the parent -> child edge in both directions, once."""
    if not _contains(child.parents, parent):
        child.parents.append(parent)
    if not _contains(parent.children, child):
        parent.children.append(child)


def _contains(nodes: list[GraphNode], node: GraphNode) -> bool:
    return any(n is node for n in nodes)


def _discard(nodes: list[GraphNode], node: GraphNode) -> None:
    for i, n in enumerate(nodes):
        if n is node:
            del nodes[i]
            return
