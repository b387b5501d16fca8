"""
Project manifest and layout helpers.

Pure functions over the filesystem for finding a project's root, reading
its declared name, spotting executable packages and turning paths into
dotted identifiers. They share no state with the graph builder.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Iterator

from imptree.config import EXCLUDED_DIR_NAMES, MAIN_MODULE_FILE, MANIFEST_FILE
from imptree.errors import ManifestError
from imptree.parser import has_main_guard

logger = logging.getLogger(__name__)


def name_from(path: Path | str) -> str:
    """
    Return the project name declared in the manifest at path.

    Reads `[project].name` from pyproject.toml, falling back to
    `[tool.poetry].name`.

    Args:
        path: A project root, i.e. a directory holding pyproject.toml

    Returns:
        The declared project name

    Raises:
        ManifestError: If the manifest is missing, unreadable, or declares
            no name
    """
    manifest = Path(path) / MANIFEST_FILE
    try:
        with open(manifest, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ManifestError(f"could not open {MANIFEST_FILE}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"could not parse {manifest}: {e}") from e

    name = data.get("project", {}).get("name")
    if not name:
        name = data.get("tool", {}).get("poetry", {}).get("name")
    if not name:
        raise ManifestError(f"no project name declared in {manifest}")
    return name


def is_root_path(path: Path | str) -> bool:
    """Return True if path is a project root, i.e. holds a manifest."""
    return (Path(path) / MANIFEST_FILE).is_file()


def root_path_from(start: Path | str) -> Path:
    """
    Walk up from start until a project root is found.

    Raises:
        ManifestError: If no directory up to the filesystem root holds a
            manifest
    """
    current = Path(start).resolve()
    for candidate in (current, *current.parents):
        if is_root_path(candidate):
            return candidate

    raise ManifestError(f"could not find a project root above {current}")


def root_path_from_working_dir() -> Path:
    """Walk up from the working directory until a project root is found."""
    return root_path_from(Path.cwd())


def is_main_package(path: Path | str) -> bool:
    """
    Return True if the directory at path is an executable package.

    A directory is executable if it holds __main__.py, or if any of its
    .py files has a module-level `if __name__ == "__main__":` guard.

    Raises:
        FileNotFoundError: If path does not exist
        NotADirectoryError: If path is not a directory
        libcst.ParserSyntaxError: If a .py file has syntax errors
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Directory not found: {path}")

    if not path.is_dir():
        raise NotADirectoryError(f"Not a directory: {path}")

    if (path / MAIN_MODULE_FILE).is_file():
        return True

    for file_path in sorted(path.glob("*.py")):
        if not file_path.is_file():
            continue
        if has_main_guard(file_path.read_text(encoding="utf-8")):
            logger.debug("found main guard in %s", file_path)
            return True

    return False


def import_path_from(path: Path | str, module_name: str, root: Path | str) -> str:
    """
    Return the identifier of path given the module name and its root.

    Example:
        path = /Users/john/repos/example/app/a/b
        root = /Users/john/repos/example/app
        module_name = app

        Returns = app.a.b

    A trailing .py suffix and a final __init__ part are dropped, so
    app/a/b.py and app/a/b/__init__.py also give app.a.b.

    Raises:
        ValueError: If path is not inside root
    """
    relative = Path(path).relative_to(Path(root))
    parts = list(relative.parts)
    if parts and parts[-1].endswith(".py"):
        parts[-1] = parts[-1][:-3]
    if parts and parts[-1] == "__init__":
        parts.pop()

    return ".".join([module_name, *parts])


def iter_package_dirs(root: Path | str) -> Iterator[Path]:
    """
    Iterate over root and every directory below it, in sorted order.

    Hidden directories and those in EXCLUDED_DIR_NAMES are skipped.
    """
    root = Path(root)
    for dir_path, dir_names, _ in os.walk(root):
        dir_names[:] = sorted(
            d for d in dir_names if d not in EXCLUDED_DIR_NAMES and not d.startswith(".")
        )
        yield Path(dir_path)


def find_main_packages(root: Path | str, module_name: str) -> list[str]:
    """
    Return the identifiers of every executable package under root.

    Args:
        root: Directory of the top-level package named module_name
        module_name: Dotted name of the package at root

    Returns:
        Identifiers of executable packages, in directory-walk order
    """
    return [
        import_path_from(directory, module_name, root)
        for directory in iter_package_dirs(root)
        if is_main_package(directory)
    ]
