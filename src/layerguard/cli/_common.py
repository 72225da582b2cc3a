"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import GuardConfig, load_config_file, load_settings

console = Console()
err_console = Console(stderr=True, soft_wrap=True)

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_FATAL = 2


def resolve_overrides(
    workers: Optional[int] = None,
    cache: Optional[bool] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> dict:
    """Build setting overrides from CLI options; unset flags keep the file's value."""
    overrides: dict = {"verbose": verbose, "quiet": quiet}
    if workers is not None:
        overrides["workers"] = workers
    if cache is not None:
        overrides["cache"] = {"enabled": cache}
    return overrides


def resolve_settings(config: Optional[Path] = None, **overrides) -> GuardConfig:
    """Settings only (no contracts): the file's [settings] when given, + env + overrides."""
    raw = load_config_file(config) if config is not None else {}
    return load_settings(raw.get("settings"), **overrides)
