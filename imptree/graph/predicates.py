"""
Ready-made include predicates for GraphBuilder.build.
"""

from imptree.models import MatchUnit, SourceUnit


def within(prefix: str) -> MatchUnit:
    """
    Match units that are the package `prefix` or live inside it.

    Example:
        >>> match = within("acme")
        >>> match(SourceUnit("acme.cli")), match(SourceUnit("acmetools"))
        (True, False)
    """

    def match(unit: SourceUnit) -> bool:
        return unit.identifier == prefix or unit.identifier.startswith(prefix + ".")

    return match


def exclude_external(unit: SourceUnit) -> bool:
    """Match units resolved inside the search paths."""
    return not unit.is_external


def include_all(unit: SourceUnit) -> bool:
    """Match every unit."""
    return True


def all_of(*predicates: MatchUnit) -> MatchUnit:
    """Match units accepted by every one of the predicates."""

    def match(unit: SourceUnit) -> bool:
        return all(predicate(unit) for predicate in predicates)

    return match
