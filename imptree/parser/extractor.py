"""
LibCST-based Import Extractor

This module provides the parsing functionality for imptree, extracting
import statements and executable entry points from Python source code.

Key Components:
    - ImportCollector: CST visitor that extracts import statements
    - MainGuardCollector: CST visitor that detects `if __name__ == "__main__":`
    - extract_imports_from_source: Entry point for string-based extraction
    - extract_imports_from_file: Entry point for file-based extraction
    - has_main_guard: Entry point for entry-point detection

Design Decisions:
    - Uses LibCST (not ast) to keep position information for every import
    - Records imports at any depth, flagging those inside functions and
      those guarded by `if TYPE_CHECKING:` so callers can filter them
    - Does not resolve imports; turning module names into files is the
      loader's job

Limitation:
    Dynamic imports (importlib.import_module, __import__) are not seen.
"""

from dataclasses import dataclass, field
from pathlib import Path
import libcst as cst
from libcst.helpers import get_full_name_for_node
from libcst.metadata import MetadataWrapper, PositionProvider


@dataclass
class ImportInfo:
    """
    One imported module as written in the source.

    `import a.b, c` produces two ImportInfo entries; `from .x import y, z`
    produces one with names ["y", "z"].

    Attributes:
        module: Dotted module name as written, "" for `from . import x`
        names: Names imported by a from-import; empty for a plain import
        level: Number of leading dots of a relative import, 0 if absolute
        line: 1-indexed line of the import statement
        is_from: True for `from ... import ...`
        in_function: True if the import sits inside a function body
        type_checking_only: True if the import is guarded by TYPE_CHECKING
    """

    module: str
    names: list[str] = field(default_factory=list)
    level: int = 0
    line: int = 0
    is_from: bool = False
    in_function: bool = False
    type_checking_only: bool = False

    @property
    def is_relative(self) -> bool:
        """Check if this is a relative import."""
        return self.level > 0


def _is_type_checking_test(test: cst.BaseExpression) -> bool:
    """Match `TYPE_CHECKING` and `typing.TYPE_CHECKING`."""
    name = get_full_name_for_node(test)
    return name is not None and name.split(".")[-1] == "TYPE_CHECKING"


def _is_main_guard_test(test: cst.BaseExpression) -> bool:
    """Match `__name__ == "__main__"` in either operand order."""
    if not isinstance(test, cst.Comparison) or len(test.comparisons) != 1:
        return False
    target = test.comparisons[0]
    if not isinstance(target.operator, cst.Equal):
        return False

    operands = (test.left, target.comparator)
    has_name = any(isinstance(o, cst.Name) and o.value == "__name__" for o in operands)
    has_main = any(
        isinstance(o, cst.SimpleString) and o.evaluated_value == "__main__" for o in operands
    )
    return has_name and has_main


class ImportCollector(cst.CSTVisitor):
    """
    CST Visitor that collects import statements.

    Handles:
        - Plain imports: import a.b as c
        - From-imports, absolute and relative: from ..a import b
        - Star imports: from a import *
        - Imports nested in functions and TYPE_CHECKING blocks

    Usage:
        wrapper = MetadataWrapper(module)
        collector = ImportCollector()
        wrapper.visit(collector)
        imports = collector.imports
    """

    METADATA_DEPENDENCIES = (PositionProvider,)

    def __init__(self) -> None:
        self.imports: list[ImportInfo] = []
        self._function_depth = 0
        self._type_checking_depth = 0

    def visit_FunctionDef(self, node: cst.FunctionDef) -> bool:
        self._function_depth += 1
        return True

    def leave_FunctionDef(self, original_node: cst.FunctionDef) -> None:
        self._function_depth -= 1

    def visit_If_body(self, node: cst.If) -> None:
        if _is_type_checking_test(node.test):
            self._type_checking_depth += 1

    def leave_If_body(self, node: cst.If) -> None:
        if _is_type_checking_test(node.test):
            self._type_checking_depth -= 1

    def visit_Import(self, node: cst.Import) -> bool:
        """Record every module of a plain import statement."""
        line = self._line_of(node)
        for alias in node.names:
            module = get_full_name_for_node(alias.name)
            if module is None:
                continue
            self.imports.append(self._make_info(module=module, line=line))
        return False

    def visit_ImportFrom(self, node: cst.ImportFrom) -> bool:
        """Record a from-import with its imported names and relative level."""
        module = ""
        if node.module is not None:
            module = get_full_name_for_node(node.module) or ""

        if isinstance(node.names, cst.ImportStar):
            names = ["*"]
        else:
            names = [
                name
                for name in (get_full_name_for_node(alias.name) for alias in node.names)
                if name is not None
            ]

        self.imports.append(
            self._make_info(
                module=module,
                names=names,
                level=len(node.relative),
                line=self._line_of(node),
                is_from=True,
            )
        )
        return False

    def _make_info(self, **kwargs) -> ImportInfo:
        return ImportInfo(
            in_function=self._function_depth > 0,
            type_checking_only=self._type_checking_depth > 0,
            **kwargs,
        )

    def _line_of(self, node: cst.CSTNode) -> int:
        try:
            return self.get_metadata(PositionProvider, node).start.line
        except KeyError:
            return 0


class MainGuardCollector(cst.CSTVisitor):
    """
    CST Visitor that detects a module-level `if __name__ == "__main__":`.

    Function and class bodies are skipped, since a guard there never runs
    when the module is executed as a script.
    """

    def __init__(self) -> None:
        self.found = False

    def visit_FunctionDef(self, node: cst.FunctionDef) -> bool:
        return False

    def visit_ClassDef(self, node: cst.ClassDef) -> bool:
        return False

    def visit_If(self, node: cst.If) -> bool:
        if _is_main_guard_test(node.test):
            self.found = True
            return False
        return True


def extract_imports_from_source(source: str) -> list[ImportInfo]:
    """
    Extract all import statements from Python source code.

    Args:
        source: Python source code as a string

    Returns:
        List of ImportInfo objects in source order

    Raises:
        libcst.ParserSyntaxError: If the source code has syntax errors

    Example:
        >>> imports = extract_imports_from_source("import os\\nfrom . import util\\n")
        >>> [(i.module, i.level) for i in imports]
        [('os', 0), ('', 1)]
    """
    module = cst.parse_module(source)
    wrapper = MetadataWrapper(module)
    collector = ImportCollector()
    wrapper.visit(collector)

    return collector.imports


def extract_imports_from_file(file_path: Path | str) -> list[ImportInfo]:
    """
    Extract all import statements from a Python file.

    Args:
        file_path: Path to the Python file

    Returns:
        List of ImportInfo objects in source order

    Raises:
        FileNotFoundError: If the file doesn't exist
        libcst.ParserSyntaxError: If the file has syntax errors
        UnicodeDecodeError: If the file has encoding issues
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    return extract_imports_from_source(file_path.read_text(encoding="utf-8"))


def has_main_guard(source: str) -> bool:
    """
    Check whether source code runs something when executed as a script.

    Args:
        source: Python source code as a string

    Returns:
        True if the module has a module-level `if __name__ == "__main__":`

    Raises:
        libcst.ParserSyntaxError: If the source code has syntax errors
    """
    module = cst.parse_module(source)
    collector = MainGuardCollector()
    module.visit(collector)
    return collector.found
