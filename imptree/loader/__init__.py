"""
Loader module for imptree.

This module resolves dotted module names to source files and loads them,
with everything they import, into a graph of SourceUnits.
"""

from imptree.loader.packages import (
    count_load_errors,
    is_stdlib_module,
    is_valid_identifier,
    load_units,
    ModuleLoader,
)

__all__ = [
    "count_load_errors",
    "is_stdlib_module",
    "is_valid_identifier",
    "load_units",
    "ModuleLoader",
]
