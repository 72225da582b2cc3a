"""Data models for the module import graph.

Edges are directed: an edge A -> B means module A references module B.
Every ordered view of the graph (modules, successors, edges) follows
*discovery order*, the lexicographic order of dotted module paths, so
results never depend on filesystem walk order or on set iteration order.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Sequence

from ..exceptions import GuardIssue


@dataclass(frozen=True)
class Module:
    """A unit of code identified by its dotted path."""

    path: str  # unique key, e.g. "app.billing.models.invoice"
    file: str = ""  # source file relative to the scan root
    is_package: bool = False
    layer: Optional[str] = None  # set by layers-contract classification

    @property
    def package(self) -> str:
        """Top-level root module this module belongs to."""
        return self.path.split(".", 1)[0]

    def with_layer(self, layer: Optional[str]) -> "Module":
        return replace(self, layer=layer)


@dataclass(frozen=True, order=True)
class ImportEdge:
    """Directed reference between two modules (set semantics)."""

    source: str
    target: str

    def __str__(self) -> str:
        return f"{self.source} -> {self.target}"


@dataclass
class ModuleGraph:
    """Module graph produced by one scan.

    Attributes:
        modules: Module path -> Module
        adjacency: Module path -> paths it imports
        reverse: Module path -> paths importing it
        warnings: Non-fatal issues met while building the graph

    Call ``finalize`` once construction is done: it precomputes the sorted
    successor lists, and from then on queries only read the graph, so it can
    be shared between evaluation threads.
    """

    modules: dict[str, Module] = field(default_factory=dict)
    adjacency: dict[str, set[str]] = field(default_factory=dict)
    reverse: dict[str, set[str]] = field(default_factory=dict)
    warnings: list[GuardIssue] = field(default_factory=list)
    _ordered: dict[str, list[str]] = field(default_factory=dict, repr=False, compare=False)

    # ── Construction ───────────────────────────────────────────

    def add_module(self, module: Module) -> Module:
        """Register a module; a path already present keeps its first Module."""
        existing = self.modules.get(module.path)
        if existing is not None:
            return existing
        self.modules[module.path] = module
        self.adjacency[module.path] = set()
        self.reverse[module.path] = set()
        return module

    def add_edge(self, source: str, target: str) -> bool:
        """Add source -> target. Returns False for duplicates and self-edges.

        Raises:
            KeyError: If either end is not a known module
        """
        if source not in self.modules:
            raise KeyError(source)
        if target not in self.modules:
            raise KeyError(target)
        if source == target or target in self.adjacency[source]:
            return False
        self.adjacency[source].add(target)
        self.reverse[target].add(source)
        self._ordered.pop(source, None)
        return True

    # ── Queries ────────────────────────────────────────────────

    def __contains__(self, path: object) -> bool:
        return path in self.modules

    def __len__(self) -> int:
        return len(self.modules)

    @property
    def module_count(self) -> int:
        return len(self.modules)

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.adjacency.values())

    @property
    def packages(self) -> list[str]:
        return sorted({m.package for m in self.modules.values()})

    def module_paths(self) -> list[str]:
        """All module paths in discovery order."""
        return sorted(self.modules)

    def iter_modules(self) -> list[Module]:
        return [self.modules[p] for p in self.module_paths()]

    def finalize(self) -> "ModuleGraph":
        """Precompute every successor list; returns the graph itself."""
        self._ordered = {path: sorted(targets) for path, targets in self.adjacency.items()}
        return self

    def successors(self, path: str) -> list[str]:
        """Modules imported by ``path``, in discovery order."""
        ordered = self._ordered.get(path)
        if ordered is None:
            return sorted(self.adjacency.get(path, ()))
        return ordered

    def predecessors(self, path: str) -> list[str]:
        return sorted(self.reverse.get(path, ()))

    def has_edge(self, source: str, target: str) -> bool:
        return target in self.adjacency.get(source, ())

    def edges(self) -> list[ImportEdge]:
        """All edges, sorted by (source, target)."""
        return [
            ImportEdge(source, target)
            for source in self.module_paths()
            for target in self.successors(source)
        ]

    def edge_set(self) -> frozenset[ImportEdge]:
        return frozenset(self.edges())

    def find(self, predicate) -> list[str]:
        """Module paths satisfying ``predicate(path)``, in discovery order."""
        return [p for p in self.module_paths() if predicate(p)]

    def is_path(self, path: Sequence[str]) -> bool:
        """Whether consecutive modules in ``path`` are all joined by real edges."""
        if len(path) < 2:
            return False
        return all(self.has_edge(a, b) for a, b in zip(path, path[1:]))

    @classmethod
    def from_edges(
        cls, edges: Iterable[tuple[str, str]], modules: Iterable[str] = ()
    ) -> "ModuleGraph":
        """Build a graph directly from ``(source, target)`` pairs."""
        graph = cls()
        for path in modules:
            graph.add_module(Module(path=path))
        for source, target in edges:
            graph.add_module(Module(path=source))
            graph.add_module(Module(path=target))
            graph.add_edge(source, target)
        return graph.finalize()
