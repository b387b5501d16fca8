"""
imptree CLI

Command-line interface for exploring a project's import graph.

Commands:
    imptree tree <module>              Show the import graph of a module
    imptree importers <module> <name>  Show which modules import <name>
    imptree prune <module> <name>      Show what goes away with <name>
    imptree mains [path]               List executable packages

Usage:
    $ imptree tree myapp.cli
    $ imptree importers myapp.cli myapp.db.session
    $ imptree prune myapp.cli myapp.legacy
    $ imptree mains
"""

import logging
from pathlib import Path
from typing import NoReturn, Optional

import libcst as cst
import networkx as nx
import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from imptree import __version__
from imptree.config import LoadConfig, PATH_ENVVAR
from imptree.errors import ImpTreeError
from imptree.graph import (
    GraphBuilder,
    all_of,
    exclude_external,
    find_node,
    include_all,
    iter_nodes,
    remove_node_recursively,
    to_networkx,
    within,
)
from imptree.models import GraphNode, MatchUnit
from imptree.module import find_main_packages, name_from, root_path_from_working_dir

# Initialize Typer app and Rich consoles
app = typer.Typer(
    name="imptree",
    help="imptree: explore the import graph of a Python project",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

PATH_OPTION = typer.Option(
    None,
    "--path",
    "-p",
    envvar=PATH_ENVVAR,
    help="Project root (default: nearest directory with pyproject.toml)",
    exists=True,
    file_okay=False,
    dir_okay=True,
    resolve_path=True,
)
PREFIX_OPTION = typer.Option(
    None,
    "--prefix",
    help="Only include modules inside this package (default: the module's top-level package)",
)
ALL_OPTION = typer.Option(
    False,
    "--all",
    "-a",
    help="Include modules from every package, not just one",
)
EXTERNAL_OPTION = typer.Option(
    False,
    "--external",
    "-e",
    help="With --all, also include stdlib and third-party modules",
)


@app.command()
def tree(
    module: str = typer.Argument(..., help="Dotted name of the module to start from"),
    path: Optional[Path] = PATH_OPTION,
    prefix: Optional[str] = PREFIX_OPTION,
    all_packages: bool = ALL_OPTION,
    external: bool = EXTERNAL_OPTION,
) -> None:
    """
    Show the import graph of a module as a tree.

    Modules imported from several places are expanded the first time they
    appear and marked afterwards.
    """
    root = _build_or_exit(module, path, _include_for(module, prefix, all_packages, external))

    console.print(_render_tree(root))
    console.print()
    _print_graph_summary(root)


@app.command()
def importers(
    module: str = typer.Argument(..., help="Dotted name of the module to start from"),
    target: str = typer.Argument(..., help="Module whose importers to show"),
    path: Optional[Path] = PATH_OPTION,
    prefix: Optional[str] = PREFIX_OPTION,
    all_packages: bool = ALL_OPTION,
    external: bool = EXTERNAL_OPTION,
) -> None:
    """
    Show which modules in the graph import a module.
    """
    root = _build_or_exit(module, path, _include_for(module, prefix, all_packages, external))
    node = _find_or_exit(root, target)

    if not node.parents:
        console.print(f"[yellow]Nothing in the graph imports {target}.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Modules importing {target}", box=box.ROUNDED)
    table.add_column("Importer", style="cyan")
    table.add_column("Its importers", justify="right")

    for parent in node.parents:
        table.add_row(parent.identifier, str(len(parent.parents)))

    console.print(table)


@app.command()
def prune(
    module: str = typer.Argument(..., help="Dotted name of the module to start from"),
    target: str = typer.Argument(..., help="Module to remove from the graph"),
    path: Optional[Path] = PATH_OPTION,
    prefix: Optional[str] = PREFIX_OPTION,
    all_packages: bool = ALL_OPTION,
    external: bool = EXTERNAL_OPTION,
) -> None:
    """
    Remove a module from the graph and show what goes away with it.

    Modules only reachable through the removed one are removed too;
    modules still imported elsewhere stay.
    """
    root = _build_or_exit(module, path, _include_for(module, prefix, all_packages, external))
    node = _find_or_exit(root, target)

    before = sum(1 for _ in iter_nodes(root))
    removed = remove_node_recursively(root, node)
    # Removing the root empties the graph even though the root object survives
    after = 0 if node is root else sum(1 for _ in iter_nodes(root))

    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Module", style="red")
    for removed_node in removed:
        table.add_row(removed_node.identifier)

    panel = Panel(
        table,
        title=f"[bold red]✗ {len(removed)} module(s) removed[/bold red]",
        border_style="red",
    )
    console.print(panel)
    console.print(f"[dim]{before} module(s) before, {after} after.[/dim]")


@app.command()
def mains(
    path: Optional[Path] = typer.Argument(
        None,
        envvar=PATH_ENVVAR,
        help="Project root (default: nearest directory with pyproject.toml)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    package: Optional[str] = typer.Option(
        None,
        "--package",
        help="Top-level package to search (default: derived from the project name)",
    ),
) -> None:
    """
    List executable packages (with __main__.py or a __main__ guard).
    """
    try:
        project_root = path if path is not None else root_path_from_working_dir()
        if package is None:
            package = name_from(project_root).replace("-", "_").lower()
    except ImpTreeError as e:
        _exit_with_error(e)

    relative = Path(*package.split("."))
    package_dir = None
    for base in _search_paths(project_root):
        if (base / relative).is_dir():
            package_dir = base / relative
            break

    if package_dir is None:
        err_console.print(f"[bold red]Error:[/bold red] package '{package}' not found in {project_root}")
        raise typer.Exit(1)

    try:
        found = find_main_packages(package_dir, package)
    except cst.ParserSyntaxError as e:
        err_console.print(f"[bold red]Error:[/bold red] could not parse a module in {package}: {e.message}")
        raise typer.Exit(1)
    except (OSError, UnicodeDecodeError) as e:
        err_console.print(f"[bold red]Error:[/bold red] could not read a module in {package}: {e}")
        raise typer.Exit(1)
    if not found:
        console.print(f"[yellow]No executable packages found in {package}.[/yellow]")
        raise typer.Exit(0)

    console.print(f"\n[bold blue]Executable packages in {package}:[/bold blue]")
    for identifier in found:
        console.print(f"   • [cyan]{identifier}[/cyan]")


# Helper functions for building and output formatting

def _search_paths(project_root: Path) -> list[Path]:
    """Project root plus its src/ directory when the project uses a src layout."""
    paths = [project_root]
    if (project_root / "src").is_dir():
        paths.append(project_root / "src")
    return paths


def _include_for(
    module: str,
    prefix: Optional[str],
    all_packages: bool,
    external: bool,
) -> MatchUnit:
    """Pick the include predicate matching the CLI options."""
    if all_packages:
        return include_all if external else exclude_external
    return all_of(exclude_external, within(prefix or module.split(".")[0]))


def _build_or_exit(module: str, path: Optional[Path], include: MatchUnit) -> GraphNode:
    """Build the graph for module, exiting with an error message on failure."""
    try:
        project_root = path if path is not None else root_path_from_working_dir()
        builder = GraphBuilder(LoadConfig(search_paths=_search_paths(project_root)))
        return builder.build(module, include)
    except ImpTreeError as e:
        _exit_with_error(e)


def _find_or_exit(root: GraphNode, identifier: str) -> GraphNode:
    node = find_node(root, identifier)
    if node is None:
        err_console.print(f"[red]Module '{identifier}' is not in the graph.[/red]")
        raise typer.Exit(1)
    return node


def _exit_with_error(error: ImpTreeError) -> NoReturn:
    err_console.print(f"[bold red]Error:[/bold red] {error}")
    if error.__cause__ is not None:
        err_console.print(f"   [dim]caused by: {error.__cause__}[/dim]")
    raise typer.Exit(1)


def _render_tree(root: GraphNode) -> Tree:
    """Render the graph as a rich Tree, expanding each module once."""
    rendered = Tree(f"[bold]{root.identifier}[/bold]")
    expanded = {id(root)}

    def add_children(node: GraphNode, branch: Tree) -> None:
        for child in node.children:
            label = f"[cyan]{child.identifier}[/cyan]"
            if len(child.parents) > 1:
                label += f" [dim]({len(child.parents)} importers)[/dim]"
            if id(child) in expanded:
                if child.children:
                    branch.add(f"{label} [dim]…[/dim]")
                else:
                    branch.add(label)
                continue
            expanded.add(id(child))
            add_children(child, branch.add(label))

    add_children(root, rendered)
    return rendered


def _print_graph_summary(root: GraphNode) -> None:
    """Print summary counts for the graph."""
    graph = to_networkx(root)
    cyclic_groups = _count_cyclic_groups(graph)

    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Label", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Modules", str(graph.number_of_nodes()))
    table.add_row("Imports", str(graph.number_of_edges()))
    table.add_row("Cyclic module groups", str(cyclic_groups))
    table.add_row("Leaf modules", str(sum(1 for node in iter_nodes(root) if node.is_leaf)))

    console.print(Panel(table, title="[bold green]✓ Graph built[/bold green]", border_style="green"))


def _count_cyclic_groups(graph: nx.DiGraph) -> int:
    """Count strongly connected components that contain an import cycle."""
    count = 0
    for component in nx.strongly_connected_components(graph):
        member = next(iter(component))
        if len(component) > 1 or graph.has_edge(member, member):
            count += 1
    return count


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold]imptree[/bold] version {__version__}")
        raise typer.Exit()


# Version and logging options
@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log debug output to stderr",
    ),
) -> None:
    """
    imptree: explore the import graph of a Python project.
    """
    _configure_logging(verbose)


if __name__ == "__main__":
    app()
