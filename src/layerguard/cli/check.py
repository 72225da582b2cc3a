"""The ``check`` command: scan, evaluate, report, exit code."""

from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..api import load_project, open_cache, run_check
from ..exceptions import LayerguardError
from ..logging_config import setup_logging, verbosity_from_flags
from ..reporting import get_formatter
from . import app
from ._common import EXIT_FAIL, EXIT_FATAL, EXIT_PASS, err_console, resolve_overrides


class OutputFormat(str, Enum):
    text = "text"
    json = "json"
    github = "github"


@app.command()
def check(
    root: Path = typer.Option(
        Path("."),
        "--root",
        "-r",
        help="Source tree to scan (default: current directory)",
    ),
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Contract file (TOML or JSON)",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.text,
        "--format",
        "-f",
        help="Report format",
        case_sensitive=False,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the report to a file instead of stdout",
        dir_okay=False,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Parallel workers for parsing and evaluation (default: auto-detect)",
        min=1,
        max=32,
    ),
    cache: Optional[bool] = typer.Option(
        None,
        "--cache/--no-cache",
        help="Use the on-disk import cache (default: from config)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """
    Check import boundaries. Exit 0 when every contract is kept, 1 on
    violations, 2 on configuration or scan errors.

    [bold cyan]Examples:[/bold cyan]

      layerguard check --root src --config layerguard.toml

      layerguard check -c pyproject.toml --format github
    """
    logger = setup_logging(verbosity_from_flags(verbose, quiet))
    overrides = resolve_overrides(workers=workers, cache=cache, verbose=verbose, quiet=quiet)

    try:
        settings, contracts = load_project(config, **overrides)
        logger = setup_logging(settings.verbosity)
        with open_cache(settings) as import_cache:
            report = run_check(root, contracts, settings, import_cache)

    except LayerguardError as e:
        logger.debug(f"{e.__class__.__name__}: {e}")
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_FATAL)

    except KeyboardInterrupt:
        err_console.print("\n[yellow]Check interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception("Unexpected error during check")
        err_console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_FATAL)

    formatter = get_formatter(output_format.value)
    if output is not None:
        output.write_text(formatter.format(report), encoding="utf-8")
        err_console.print(f"Report written to [blue]{escape(str(output))}[/blue]")
    else:
        formatter.render(report)

    raise typer.Exit(EXIT_PASS if report.passed else EXIT_FAIL)
