"""
Configuration for imptree.

Holds the loader options and the project-wide defaults. The CLI builds a
LoadConfig from its options; library callers construct one directly.
"""

from dataclasses import dataclass, field
from pathlib import Path


# Manifest marking a project root
MANIFEST_FILE = "pyproject.toml"

# Entry-point file marking an executable package
MAIN_MODULE_FILE = "__main__.py"

# Environment variable the CLI reads the project path from
PATH_ENVVAR = "IMPTREE_PATH"

# Directories never treated as part of a project's import tree
EXCLUDED_DIR_NAMES = frozenset(
    {"__pycache__", ".git", ".hg", ".tox", ".venv", "venv", "node_modules", "build", "dist"}
)


def _default_search_paths() -> list[Path]:
    return [Path.cwd()]


@dataclass
class LoadConfig:
    """
    Options controlling how the loader resolves and parses modules.

    Attributes:
        search_paths: Directories searched, in order, for top-level packages
            and modules (like entries of sys.path)
        follow_imports_in_functions: If False, imports nested inside
            function bodies are ignored
        include_type_checking: If False, imports guarded by
            `if TYPE_CHECKING:` are ignored
    """

    search_paths: list[Path] = field(default_factory=_default_search_paths)
    follow_imports_in_functions: bool = True
    include_type_checking: bool = True

    def __post_init__(self) -> None:
        """Normalize search paths to absolute Paths."""
        self.search_paths = [Path(p).resolve() for p in self.search_paths]
