"""
CLI module for imptree.

The command-line interface providing tree, importers, prune, and mains commands.
"""

from cli.main import app

__all__ = ["app"]
