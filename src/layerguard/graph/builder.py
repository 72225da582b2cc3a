"""Module graph construction from a source tree.

The builder:
1. Walks the root (scanning.walker) and names each file as a module
2. Extracts references per file, in parallel when the tree is large
3. Resolves each reference to a known module, or records it as unresolved

Parsing is the only parallel step; each file yields an independent list of
references and the lists are merged in module order afterwards, so the
graph is the same whichever file finishes first.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from ..config import DEFAULT_CONFIG, GuardConfig
from ..exceptions import (
    GuardIssue,
    ParseWarning,
    SourceParseError,
    UnresolvedImportWarning,
)
from ..logging_config import get_logger
from ..scanning.cache import ImportCache
from ..scanning.languages import ImportStrategy, Reference, get_strategy
from ..scanning.walker import SourceWalker, validate_root
from .models import Module, ModuleGraph

logger = get_logger(__name__)

# Default worker count: CPU count, capped at 8 to avoid overwhelming I/O
_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

# Below this many files the thread pool costs more than it saves
_PARALLEL_THRESHOLD = 10


@dataclass(frozen=True)
class _SourceUnit:
    module: Module
    strategy: ImportStrategy


@dataclass
class _Extraction:
    references: list[Reference]
    warning: Optional[ParseWarning] = None


class GraphBuilder:
    """Builds a ModuleGraph from a root directory.

    Attributes:
        root: Directory to scan
        config: Run configuration (scan filters, languages, workers)
        strategies: Import strategies, one per language
        cache: Optional import cache
    """

    def __init__(
        self,
        root: Path,
        config: GuardConfig = DEFAULT_CONFIG,
        strategies: Optional[Sequence[ImportStrategy]] = None,
        cache: Optional[ImportCache] = None,
    ) -> None:
        self.root = Path(root)
        self.config = config
        self.strategies = list(strategies) if strategies else [
            get_strategy(name) for name in config.languages
        ]
        self.cache = cache
        self.max_workers = config.workers or _DEFAULT_WORKERS

    def build(self) -> ModuleGraph:
        """Scan the root and return its module graph.

        Raises:
            ScanError: If the root is missing/unreadable or the scan times out
        """
        root = validate_root(self.root)
        extensions = {ext for s in self.strategies for ext in s.extensions}
        walker = SourceWalker(root, self.config.scan, extensions)
        files = walker.walk()

        graph = ModuleGraph()
        graph.warnings.extend(walker.warnings)

        units = self._register_modules(graph, files)
        extractions = self._extract_all(root, units)

        for unit in units:
            extraction = extractions[unit.module.path]
            if extraction.warning is not None:
                graph.warnings.append(extraction.warning)
                continue
            self._resolve(graph, unit.module, extraction.references)

        graph.finalize()
        logger.info(
            f"Graph built: {graph.module_count} modules, {graph.edge_count} edges, "
            f"{len(graph.warnings)} warnings"
        )
        return graph

    # ── Module naming ──────────────────────────────────────────

    def _register_modules(self, graph: ModuleGraph, files: list[str]) -> list[_SourceUnit]:
        root_packages = set(self.config.scan.root_packages)
        units: list[_SourceUnit] = []

        for rel_path in files:
            strategy = next((s for s in self.strategies if s.handles(rel_path)), None)
            if strategy is None:
                continue
            named = strategy.module_name(rel_path)
            if named is None:
                logger.debug(f"Skipped (not a module name): {rel_path}")
                continue
            path, is_package = named
            module = Module(path=path, file=rel_path, is_package=is_package)
            if root_packages and module.package not in root_packages:
                continue
            if path in graph:
                logger.debug(
                    f"Skipped {rel_path}: module {path} already defined by "
                    f"{graph.modules[path].file}"
                )
                continue
            graph.add_module(module)
            units.append(_SourceUnit(module, strategy))

        units.sort(key=lambda u: u.module.path)
        return units

    # ── Extraction ─────────────────────────────────────────────

    def _extract_all(self, root: Path, units: list[_SourceUnit]) -> dict[str, _Extraction]:
        if self.max_workers <= 1 or len(units) < _PARALLEL_THRESHOLD:
            return {u.module.path: self._extract(root, u) for u in units}

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {u.module.path: executor.submit(self._extract, root, u) for u in units}
            return {path: future.result() for path, future in futures.items()}

    def _extract(self, root: Path, unit: _SourceUnit) -> _Extraction:
        module = unit.module
        filepath = root / module.file

        key = (
            self.cache.file_key(filepath, unit.strategy.name, module.path, module.is_package)
            if self.cache
            else None
        )
        if key is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return _Extraction(cached)

        try:
            content = filepath.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            return _Extraction([], self._parse_warning(module, f"cannot read file: {e}"))

        try:
            references = unit.strategy.extract(content, module.path, module.is_package)
        except SourceParseError as e:
            return _Extraction([], self._parse_warning(module, e.reason, e.line))
        except Exception as e:
            logger.error(f"Unexpected error extracting {module.file}: {e}")
            return _Extraction([], self._parse_warning(module, f"unexpected error: {e}"))

        if key is not None:
            self.cache.set(key, references)
        return _Extraction(references)

    def _parse_warning(
        self, module: Module, reason: str, line: Optional[int] = None
    ) -> ParseWarning:
        logger.debug(f"Parse warning for {module.file}: {reason}")
        context = {"module": module.path, "file": module.file, "reason": reason}
        if line is not None:
            context["line"] = line
        return ParseWarning(f"Cannot parse {module.file}: {reason}", context=context)

    # ── Resolution ─────────────────────────────────────────────

    def _resolve(self, graph: ModuleGraph, module: Module, references: list[Reference]) -> None:
        packages = set(graph.packages)
        reported: set[str] = set()

        for ref in references:
            target = next((c for c in ref.candidates if c in graph), None)
            if target is not None:
                graph.add_edge(module.path, target)
                continue
            if ref.raw in reported or not self._looks_internal(ref, packages):
                continue
            reported.add(ref.raw)
            graph.warnings.append(self._unresolved_warning(module, ref))

    @staticmethod
    def _looks_internal(ref: Reference, packages: set[str]) -> bool:
        """Relative references, or ones rooted in a scanned package, should resolve."""
        if ref.relative:
            return True
        return bool(ref.candidates) and ref.candidates[0].split(".", 1)[0] in packages

    @staticmethod
    def _unresolved_warning(module: Module, ref: Reference) -> GuardIssue:
        return UnresolvedImportWarning(
            f"{module.path} references {ref.raw}, which is not a module under the root",
            context={
                "module": module.path,
                "file": module.file,
                "line": ref.line,
                "reference": ref.raw,
            },
        )


def build_graph(
    root: Path,
    config: GuardConfig = DEFAULT_CONFIG,
    cache: Optional[ImportCache] = None,
) -> ModuleGraph:
    """Build the module graph for ``root`` with the configured strategies."""
    return GraphBuilder(root, config, cache=cache).build()
