"""
Logging for Layerguard.

Records go to stderr through rich, so stdout stays free for the report.
Only the ``layerguard`` logger is configured; the root logger and other
libraries are left as the host application set them.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "layerguard"

_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}


def verbosity_from_flags(verbose: bool = False, quiet: bool = False) -> str:
    """Map the CLI's --verbose/--quiet pair to a verbosity name (quiet wins)."""
    if quiet:
        return "quiet"
    return "verbose" if verbose else "normal"


def setup_logging(verbosity: str = "normal") -> logging.Logger:
    """
    Attach a rich stderr handler to the ``layerguard`` logger.

    Calling again replaces the handler and level, so the CLI can configure
    logging from its flags first and again once the contract file's
    ``verbosity`` setting is known.

    Args:
        verbosity: "quiet" (errors only), "normal" (warnings) or "verbose" (debug)

    Returns:
        The ``layerguard`` logger
    """
    if verbosity not in _LEVELS:
        raise ValueError(f"unknown verbosity: {verbosity!r}")
    verbose = verbosity == "verbose"

    logger = logging.getLogger(LOGGER_NAME)
    for handler in [h for h in logger.handlers if isinstance(h, RichHandler)]:
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=verbose,
        show_path=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(_LEVELS[verbosity])

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``layerguard`` namespace (e.g. ``layerguard.graph.builder``)."""
    if name is None:
        return logging.getLogger(LOGGER_NAME)
    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
