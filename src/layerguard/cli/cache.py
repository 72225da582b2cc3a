"""Cache management commands."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..exceptions import LayerguardError
from ..scanning import ImportCache
from . import app
from ._common import EXIT_FATAL, console, err_console, resolve_settings


@app.command("cache-clear")
def cache_clear(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Contract file whose [settings.cache] directory to clear",
    ),
):
    """Clear the import cache."""
    try:
        settings = resolve_settings(config)
    except LayerguardError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_FATAL)

    directory = Path(settings.cache.directory)
    if not directory.exists():
        console.print(f"[yellow]No cache at {escape(str(directory))}[/yellow]")
        raise typer.Exit(0)

    with ImportCache(cache_dir=str(directory), enabled=True) as cache:
        removed = cache.clear()
    console.print(f"[green]Cache cleared[/green] ({removed} entries removed)")
