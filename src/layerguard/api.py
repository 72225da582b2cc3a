"""Public API for Layerguard.

Example:
    >>> from layerguard import check
    >>>
    >>> report = check("src", "layerguard.toml")
    >>> report.status
    <Status.PASS: 'pass'>
    >>>
    >>> # With overrides
    >>> report = check("src", "layerguard.toml", workers=1, cache={"enabled": True})
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence, Union

from .config import DEFAULT_CONFIG, GuardConfig, load_config_file, load_settings
from .contracts import Contract, ContractEvaluator, parse_contracts
from .graph import GraphBuilder
from .logging_config import get_logger
from .reporting import CheckReport
from .scanning import ImportCache

logger = get_logger(__name__)


def load_project(
    config_file: Union[str, Path], **overrides
) -> tuple[GuardConfig, list[Contract]]:
    """Read a contract file into validated settings and contracts.

    Raises:
        ContractConfigError: If the file or any contract in it is malformed
    """
    path = Path(config_file)
    raw = load_config_file(path)
    config = load_settings(raw.get("settings"), **overrides)
    contracts = parse_contracts(raw.get("contracts"), source=path)
    logger.debug(f"Loaded {len(contracts)} contracts from {path}")
    return config, contracts


@contextmanager
def open_cache(config: GuardConfig) -> Iterator[Optional[ImportCache]]:
    """The import cache when ``config.cache.enabled``, else None; closed on exit."""
    if not config.cache.enabled:
        yield None
        return
    cache = ImportCache.from_config(config.cache)
    try:
        yield cache
    finally:
        cache.close()


def run_check(
    root: Union[str, Path],
    contracts: Sequence[Contract],
    config: GuardConfig = DEFAULT_CONFIG,
    cache: Optional[ImportCache] = None,
) -> CheckReport:
    """Build the graph under ``root`` and evaluate ``contracts`` against it.

    Raises:
        ScanError: If the root is missing/unreadable or the scan times out
    """
    start = time.perf_counter()

    graph = GraphBuilder(Path(root), config, cache=cache).build()
    results = ContractEvaluator(workers=config.workers).evaluate_all(graph, contracts)

    report = CheckReport(
        root=Path(root),
        results=results,
        scan_warnings=list(graph.warnings),
        module_count=graph.module_count,
        edge_count=graph.edge_count,
        duration_seconds=time.perf_counter() - start,
    )
    logger.info(
        f"Check {report.status.value}: {report.violation_count} violations "
        f"in {len(results)} contracts"
    )
    return report


def check(
    root: Union[str, Path] = ".",
    config_file: Union[str, Path] = "layerguard.toml",
    **overrides,
) -> CheckReport:
    """Check a source tree against the contracts of a config file.

    This is the programmatic equivalent of ``layerguard check``:
    1. Load settings and contracts from the config file (+ env, overrides)
    2. Build the module graph (optionally through the import cache)
    3. Evaluate every contract and collect the report

    Args:
        root: Directory to scan
        config_file: TOML or JSON contract file
        **overrides: Setting overrides (e.g. workers=4, scan={"root_packages": ["app"]})

    Returns:
        CheckReport; ``report.status`` is PASS or FAIL

    Raises:
        LayerguardError: On fatal configuration or scan errors
    """
    config, contracts = load_project(config_file, **overrides)
    with open_cache(config) as cache:
        return run_check(root, contracts, config, cache)
