"""
Exceptions raised by imptree.

All errors derive from ImpTreeError so callers (the CLI in particular) can
abort on any of them with a single except clause.
"""


class ImpTreeError(Exception):
    """Base class for all imptree errors."""


class LoadFailureError(ImpTreeError):
    """The loader could not load the root unit. The cause is chained."""


class AmbiguousRootError(ImpTreeError):
    """The load reported errors, or did not produce exactly one top-level unit."""


class RootNotFoundError(ImpTreeError):
    """No node was materialized, so the graph has no root."""


class BuilderReusedError(ImpTreeError):
    """A GraphBuilder was asked to build a second graph."""


class ManifestError(ImpTreeError):
    """A project manifest or project root could not be found or read."""


class InvalidIdentifierError(ImpTreeError, ValueError):
    """A string is not a dotted Python module name."""
