"""
Module Loader for imptree

This module resolves a dotted module name to its source file, parses the
file's imports, and recursively loads every imported module, producing a
graph of SourceUnits for GraphBuilder to walk.

Design Decisions:
    - One SourceUnit per identifier per load; the unit is cached before its
      imports are loaded, so import cycles terminate
    - Modules that cannot be found under the search paths become external
      leaf units instead of failing the load
    - Standard-library modules are always external, even if a project
      module of the same name exists
    - Per-unit problems (unreadable file, syntax error) are recorded on the
      unit and counted by count_load_errors; only bad arguments raise
    - Loading recurses once per level of import depth, so a chain deeper
      than the interpreter recursion limit raises RecursionError

Resolution order for `a.b` in each search path:
    1. <path>/a/b/__init__.py  (regular package)
    2. <path>/a/b.py           (module)
    3. <path>/a/b/             (namespace package, no imports)
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional
import libcst as cst

from imptree.config import LoadConfig
from imptree.errors import InvalidIdentifierError
from imptree.models import SourceUnit
from imptree.parser import ImportInfo, extract_imports_from_source

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")

# Suffix asking for every direct submodule of a package
_WILDCARD_SUFFIX = ".*"


def is_valid_identifier(identifier: str) -> bool:
    """Check if a string is a dotted Python module name."""
    return bool(_IDENTIFIER_RE.match(identifier))


def is_stdlib_module(identifier: str) -> bool:
    """Check if an identifier belongs to the standard library."""
    return identifier.split(".")[0] in sys.stdlib_module_names


class ModuleLoader:
    """
    Loads SourceUnits for dotted module names under a set of search paths.

    A loader caches every unit it creates, so loading several roots with
    the same loader shares units between them.

    Usage:
        loader = ModuleLoader(LoadConfig(search_paths=[Path("src")]))
        unit = loader.load("mypkg.cli")
        for identifier, imported in unit.imports.items():
            print(identifier, imported.is_external)
    """

    def __init__(self, config: LoadConfig) -> None:
        self.config = config
        self._units: dict[str, SourceUnit] = {}

    @property
    def loaded(self) -> dict[str, SourceUnit]:
        """All units created so far, keyed by identifier."""
        return self._units

    def load(self, identifier: str) -> SourceUnit:
        """
        Load a module and, transitively, everything it imports.

        Args:
            identifier: Dotted module name

        Returns:
            The module's SourceUnit. A module that cannot be found yields an
            external unit carrying a "cannot find module" error.
        """
        unit = self._unit_for(identifier)
        if unit.is_external and not is_stdlib_module(identifier) and not unit.errors:
            unit.errors.append(f"cannot find module {identifier!r} in search paths")
        return unit

    def load_submodules(self, package: str) -> list[SourceUnit]:
        """
        Load every direct submodule of a package, in name order.

        A package that cannot be found yields a single unit with an error.
        """
        resolved = self.resolve(package)
        if resolved is None or not resolved[1]:
            return [self.load(package)]

        path, _ = resolved
        directory = path.parent if path.is_file() else path
        names = set()
        for child in directory.iterdir():
            if child.is_file() and child.suffix == ".py" and child.stem != "__init__":
                names.add(child.stem)
            elif child.is_dir() and (child / "__init__.py").is_file():
                names.add(child.name)

        return [
            self.load(f"{package}.{name}")
            for name in sorted(names)
            if is_valid_identifier(name)
        ]

    def resolve(self, identifier: str) -> Optional[tuple[Path, bool]]:
        """
        Find the source of a module under the search paths.

        Returns:
            (path, is_package) where path is the .py file, the package's
            __init__.py, or the namespace package directory; None if the
            module cannot be found.
        """
        if is_stdlib_module(identifier):
            return None

        parts = identifier.split(".")
        namespace_dir: Optional[Path] = None
        for base in self.config.search_paths:
            package_dir = base.joinpath(*parts)
            init_file = package_dir / "__init__.py"
            if init_file.is_file():
                return init_file, True

            module_file = base.joinpath(*parts[:-1], f"{parts[-1]}.py")
            if module_file.is_file():
                return module_file, False

            if namespace_dir is None and package_dir.is_dir():
                namespace_dir = package_dir

        if namespace_dir is not None:
            return namespace_dir, True
        return None

    def _unit_for(self, identifier: str) -> SourceUnit:
        """Get or create the unit for an identifier, loading its imports."""
        if identifier in self._units:
            return self._units[identifier]

        resolved = self.resolve(identifier)
        if resolved is None:
            unit = SourceUnit(identifier=identifier, is_external=True)
            self._units[identifier] = unit
            return unit

        path, is_package = resolved
        if path.is_dir():
            unit = SourceUnit(identifier=identifier, is_package=True)
            self._units[identifier] = unit
            return unit

        unit = SourceUnit(identifier=identifier, file_path=path, is_package=is_package)
        # Cache before recursing so import cycles terminate
        self._units[identifier] = unit

        imports = self._read_imports(unit)
        for imported in self._imported_identifiers(unit, imports):
            unit.imports[imported] = self._unit_for(imported)

        logger.debug("loaded %s (%d imports)", identifier, len(unit.imports))
        return unit

    def _read_imports(self, unit: SourceUnit) -> list[ImportInfo]:
        try:
            source = unit.file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            unit.errors.append(f"{unit.file_path}: could not read file: {e}")
            return []

        try:
            return extract_imports_from_source(source)
        except cst.ParserSyntaxError as e:
            unit.errors.append(f"{unit.file_path}: syntax error: {e.message}")
            return []

    def _imported_identifiers(self, unit: SourceUnit, imports: list[ImportInfo]) -> list[str]:
        """Turn import statements into unique absolute identifiers, in source order."""
        identifiers: dict[str, None] = {}

        for info in imports:
            if info.in_function and not self.config.follow_imports_in_functions:
                continue
            if info.type_checking_only and not self.config.include_type_checking:
                continue

            target = info.module
            if info.is_relative:
                target = self._absolute_target(unit, info)
                if target is None:
                    unit.errors.append(
                        f"line {info.line}: relative import beyond top-level package"
                    )
                    continue

            if not info.is_from or self.resolve(target) is None:
                identifiers[target] = None
                continue

            # from pkg import name: name is either a submodule or an attribute of pkg
            attribute_import = False
            for name in info.names:
                candidate = f"{target}.{name}"
                if name != "*" and self.resolve(candidate) is not None:
                    identifiers[candidate] = None
                else:
                    attribute_import = True
            if attribute_import:
                identifiers[target] = None

        identifiers.pop(unit.identifier, None)
        return list(identifiers)

    @staticmethod
    def _absolute_target(unit: SourceUnit, info: ImportInfo) -> Optional[str]:
        package = unit.identifier if unit.is_package else unit.identifier.rpartition(".")[0]
        parts = package.split(".") if package else []
        keep = len(parts) - (info.level - 1)
        if keep < 1:
            return None

        base = ".".join(parts[:keep])
        return f"{base}.{info.module}" if info.module else base


def load_units(root_identifier: str, config: Optional[LoadConfig] = None) -> list[SourceUnit]:
    """
    Load the top-level unit(s) named by root_identifier.

    Args:
        root_identifier: Dotted module name, or "pkg.*" for every direct
            submodule of pkg
        config: Loader options; defaults to searching the current directory

    Returns:
        The loaded top-level units. A plain identifier yields exactly one.

    Raises:
        InvalidIdentifierError: If root_identifier is not a module name
        FileNotFoundError: If a search path does not exist

    Example:
        >>> units = load_units("imptree.graph", LoadConfig(search_paths=["."]))
        >>> [u.identifier for u in units]
        ['imptree.graph']
    """
    if config is None:
        config = LoadConfig()

    for search_path in config.search_paths:
        if not search_path.is_dir():
            raise FileNotFoundError(f"Search path not found: {search_path}")

    loader = ModuleLoader(config)
    if root_identifier.endswith(_WILDCARD_SUFFIX):
        package = root_identifier[: -len(_WILDCARD_SUFFIX)]
        if not is_valid_identifier(package):
            raise InvalidIdentifierError(f"Not a module name: {root_identifier!r}")
        return loader.load_submodules(package)

    if not is_valid_identifier(root_identifier):
        raise InvalidIdentifierError(f"Not a module name: {root_identifier!r}")
    return [loader.load(root_identifier)]


def count_load_errors(units: list[SourceUnit]) -> int:
    """
    Log every error in the unit graph and return how many there are.

    Each unit reachable from the given ones is visited once, so shared and
    cyclic imports are counted a single time.
    """
    count = 0
    seen: set[str] = set()
    stack = list(reversed(units))

    while stack:
        unit = stack.pop()
        if unit.identifier in seen:
            continue
        seen.add(unit.identifier)

        for error in unit.errors:
            logger.error("%s: %s", unit.identifier, error)
            count += 1

        stack.extend(reversed(list(unit.imports.values())))

    return count
