"""
Test fixtures for imptree.

This module provides sample Python sources, in-memory unit graphs and a
helper for writing small projects to disk.
"""

from pathlib import Path

from imptree.models import SourceUnit

# Sample code with various import forms
PLAIN_IMPORTS = '''
import os
import acme.core, acme.util as u
'''

FROM_IMPORTS = '''
from acme.core import engine
from acme import util, settings
from acme.core.engine import *
'''

RELATIVE_IMPORTS = '''
from . import sibling
from .sibling import helper
from ..core import engine
from .. import util
'''

NESTED_IMPORTS = '''
import json

def load():
    import csv
    return csv

class Loader:
    def read(self):
        from acme import util
        return util
'''

TYPE_CHECKING_IMPORTS = '''
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from acme.core import engine
else:
    import acme.util

if typing.TYPE_CHECKING:
    import acme.settings
'''

MAIN_GUARD = '''
def main():
    print("hi")

if __name__ == "__main__":
    main()
'''

REVERSED_MAIN_GUARD = '''
if "__main__" == __name__:
    pass
'''

NESTED_MAIN_GUARD = '''
def run():
    if __name__ == "__main__":
        pass
'''

NO_MAIN_GUARD = '''
def main():
    if __name__ != "__main__":
        return
'''

SYNTAX_ERROR = '''
def broken(:
    pass
'''


def unit_graph(edges: dict[str, list[str]]) -> dict[str, SourceUnit]:
    """
    Build shared SourceUnits from an adjacency mapping.

    Every identifier gets exactly one SourceUnit, so the same unit is
    reachable through every importer, as with a real load.
    """
    units: dict[str, SourceUnit] = {}

    def unit(identifier: str) -> SourceUnit:
        if identifier not in units:
            units[identifier] = SourceUnit(identifier=identifier)
        return units[identifier]

    for parent, children in edges.items():
        parent_unit = unit(parent)
        for child in children:
            parent_unit.imports[child] = unit(child)

    return units


def loader_returning(*units: SourceUnit):
    """Return a load hook that ignores its arguments and returns units."""

    def load(root_identifier, config):
        return list(units)

    return load


def no_errors(units) -> int:
    return 0


def write_project(root: Path, files: dict[str, str]) -> Path:
    """
    Write files (relative path -> content) below root and return root.

    Parent directories are created as needed.
    """
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


# A small project: acme.cli imports acme.core.engine and acme.util,
# engine imports acme.util too, and util imports the stdlib and requests.
ACME_PROJECT = {
    "pyproject.toml": '[project]\nname = "acme"\nversion = "1.0"\n',
    "acme/__init__.py": "",
    "acme/__main__.py": "from acme.cli import main\nmain()\n",
    "acme/cli.py": (
        "import sys\n"
        "from acme.core import engine\n"
        "from acme import util\n"
        "\n"
        "def main():\n"
        "    engine.run(util.VALUE)\n"
        "\n"
        "if __name__ == '__main__':\n"
        "    main()\n"
    ),
    "acme/core/__init__.py": "",
    "acme/core/engine.py": "from .. import util\nimport requests\n\ndef run(v):\n    return v\n",
    "acme/util.py": "import os\nimport requests\n\nVALUE = 1\n",
    "acme/legacy.py": "from acme.core import engine\n",
    "acme/tools/__init__.py": "",
    "acme/tools/report.py": "if __name__ == '__main__':\n    print('report')\n",
}
