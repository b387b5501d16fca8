"""
Core Data Models for imptree

This module defines the data structures shared by the loader and the
graph builder:
- SourceUnit: A loaded Python module together with the modules it imports
- GraphNode: One module in the doubly-linked import graph

Design Decisions:
    - SourceUnit instances are shared per identifier within one load, so the
      unit graph may contain cycles
    - GraphNode compares by identity; two nodes are the same node only if
      they are the same object
    - Neither type renders its neighbours in repr(), since back-references
      make every non-trivial graph cyclic
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional


@dataclass(eq=False)
class SourceUnit:
    """
    A loaded Python module and its direct imports.

    Produced by the loader and consumed by GraphBuilder. A SourceUnit is
    the Python counterpart of a loaded package record: it knows its own
    identifier and maps every identifier it imports to the loaded unit.

    Attributes:
        identifier: Dotted module name, e.g. "imptree.graph.builder"
        imports: Imported identifier -> SourceUnit, in source order
        file_path: File the unit was read from; None for external units
            and namespace packages
        is_package: True if the unit is a package (__init__.py or namespace)
        is_external: True if the unit could not be resolved inside the
            configured search paths (stdlib, third-party, missing)
        errors: Problems found while loading this unit

    Invariants:
        - External units never have imports
        - Within one load, one SourceUnit instance exists per identifier
    """

    identifier: str
    imports: dict[str, "SourceUnit"] = field(default_factory=dict, repr=False)
    file_path: Optional[Path] = None
    is_package: bool = False
    is_external: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if loading this unit reported any problem."""
        return len(self.errors) > 0


# Predicate selecting which units take part in a graph.
MatchUnit = Callable[[SourceUnit], bool]


class GraphNode:
    """
    A node in the import graph: one module, what it imports, what imports it.

    Attributes:
        identifier: Dotted module name, read-only after creation
        children: Nodes for the modules this module imports, in the order
            they were first discovered
        parents: Nodes for the modules importing this module, in the order
            the edges were discovered

    Invariants:
        - c in p.children iff p in c.parents (by identity)
        - No node appears twice in the same children or parents list
    """

    __slots__ = ("_identifier", "children", "parents")

    def __init__(
        self,
        identifier: str,
        children: Optional[list["GraphNode"]] = None,
        parents: Optional[list["GraphNode"]] = None,
    ) -> None:
        self._identifier = identifier
        self.children: list[GraphNode] = children if children is not None else []
        self.parents: list[GraphNode] = parents if parents is not None else []

    @property
    def identifier(self) -> str:
        """Return the node's dotted module name."""
        return self._identifier

    @property
    def is_root(self) -> bool:
        """True if nothing in the graph imports this node."""
        return not self.parents

    @property
    def is_leaf(self) -> bool:
        """True if this node imports nothing inside the graph."""
        return not self.children

    def __repr__(self) -> str:
        return (
            f"GraphNode({self._identifier!r}, "
            f"children={[c.identifier for c in self.children]}, "
            f"parents={[p.identifier for p in self.parents]})"
        )
