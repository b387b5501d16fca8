"""
Parser module for imptree.

This module provides LibCST-based extraction of import statements and
entry-point guards from Python source files.
"""

from imptree.parser.extractor import (
    extract_imports_from_file,
    extract_imports_from_source,
    has_main_guard,
    ImportCollector,
    ImportInfo,
    MainGuardCollector,
)

__all__ = [
    "extract_imports_from_file",
    "extract_imports_from_source",
    "has_main_guard",
    "ImportCollector",
    "ImportInfo",
    "MainGuardCollector",
]
