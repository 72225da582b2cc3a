"""The ``modules`` command: show the graph a contract is checked against."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..exceptions import LayerguardError
from ..graph import GraphBuilder
from ..logging_config import setup_logging, verbosity_from_flags
from . import app
from ._common import EXIT_FATAL, console, err_console, resolve_overrides, resolve_settings


@app.command()
def modules(
    root: Path = typer.Option(Path("."), "--root", "-r", help="Source tree to scan"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Contract file whose [settings] to use",
    ),
    edges: bool = typer.Option(False, "--edges", "-e", help="Also list import edges"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """
    List the modules (and optionally edges) discovered under the root.

    Useful when writing patterns: every module path shown here is what
    contract patterns are matched against.
    """
    setup_logging(verbosity_from_flags(verbose))

    try:
        settings = resolve_settings(config, **resolve_overrides(verbose=verbose))
        setup_logging(settings.verbosity)
        graph = GraphBuilder(root, settings).build()
    except LayerguardError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_FATAL)

    if json_output:
        data = {
            "modules": [
                {"path": m.path, "file": m.file, "package": m.package}
                for m in graph.iter_modules()
            ],
            "warnings": [w.to_json() for w in graph.warnings],
        }
        if edges:
            data["edges"] = [[e.source, e.target] for e in graph.edges()]
        print(json.dumps(data, indent=2))
        return

    table = Table(title=f"{graph.module_count} modules under {escape(str(root))}", expand=False)
    table.add_column("Module", style="cyan")
    table.add_column("File", style="dim")
    table.add_column("Imports", justify="right")
    for module in graph.iter_modules():
        table.add_row(
            escape(module.path), escape(module.file), str(len(graph.successors(module.path)))
        )
    console.print(table)

    if edges:
        console.print()
        console.print(f"[bold]Edges ({graph.edge_count})[/bold]")
        for edge in graph.edges():
            console.print(f"  {escape(str(edge))}")

    for issue in graph.warnings:
        err_console.print(f"[yellow]![/yellow] {escape(str(issue))}")
