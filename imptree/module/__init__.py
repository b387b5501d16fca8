"""
Module helpers for imptree.

Utilities for locating a project's root and name from its pyproject.toml,
finding executable packages and converting paths to identifiers.
"""

from imptree.module.manifest import (
    find_main_packages,
    import_path_from,
    is_main_package,
    is_root_path,
    iter_package_dirs,
    name_from,
    root_path_from,
    root_path_from_working_dir,
)

__all__ = [
    "find_main_packages",
    "import_path_from",
    "is_main_package",
    "is_root_path",
    "iter_package_dirs",
    "name_from",
    "root_path_from",
    "root_path_from_working_dir",
]
