"""CLI entry point: registers all subcommands."""

from typing import Optional

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="layerguard",
    help="Layerguard - check import boundaries between the layers of a codebase",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]Layerguard[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


@app.callback()
def _root(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """
    Check a source tree against declared architectural contracts.

    [bold cyan]Examples:[/bold cyan]

      layerguard check --root src --config layerguard.toml

      layerguard check --root src --config layerguard.toml --format json --output report.json

      layerguard modules --root src --edges
    """


# Import subcommands to register them
from .check import check as _check  # noqa: F401, E402
from .modules import modules as _modules  # noqa: F401, E402
from .cache import cache_clear as _cache_clear  # noqa: F401, E402


def main() -> None:
    app()
