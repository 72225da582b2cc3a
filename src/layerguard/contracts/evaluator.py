"""Contract evaluation against a module graph.

Forbidden contracts are transitive: a breadth-first search from every
source module finds the shortest path to each reachable destination.
Successors are visited in discovery order, so among equally short paths
the one whose modules sort first is always the one reported.

Layers contracts are local: any single edge from a lower layer to a higher
one is a violation.

Contracts are independent. The graph is read-only during evaluation, so
contracts may be evaluated concurrently without locking, and a failure in
one contract is recorded on its own result only.
"""

from __future__ import annotations

import traceback
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..exceptions import (
    EvaluationError,
    GuardIssue,
    LayerAmbiguityError,
    UnmatchedIgnoreWarning,
)
from ..graph.models import ImportEdge, Module, ModuleGraph
from ..logging_config import get_logger
from .models import (
    Contract,
    ForbiddenContract,
    ImportRule,
    LayersContract,
    Violation,
    matches_any,
)

logger = get_logger(__name__)


@dataclass
class ContractResult:
    """Outcome of evaluating one contract."""

    contract: Contract
    violations: list[Violation] = field(default_factory=list)
    warnings: list[GuardIssue] = field(default_factory=list)
    error: Optional[EvaluationError] = None
    # Classified modules (layers contracts only)
    layer_assignment: dict[str, Module] = field(default_factory=dict)

    @property
    def status(self) -> str:
        if self.error is not None:
            return "error"
        return "fail" if self.violations else "pass"

    @property
    def passed(self) -> bool:
        return self.status == "pass"


class _GraphView:
    """Read-only view of a graph with ignored edges hidden."""

    def __init__(self, graph: ModuleGraph, ignored: frozenset[ImportEdge] = frozenset()):
        self.graph = graph
        self.ignored = ignored

    def successors(self, path: str) -> list[str]:
        targets = self.graph.successors(path)
        if not self.ignored:
            return targets
        return [t for t in targets if ImportEdge(path, t) not in self.ignored]

    def edges(self) -> list[ImportEdge]:
        return [e for e in self.graph.edges() if e not in self.ignored]


def apply_ignores(
    graph: ModuleGraph, contract: Contract
) -> tuple[_GraphView, list[GuardIssue]]:
    """Hide edges matched by the contract's ignore_imports rules.

    A rule that matches no edge is reported, since it usually outlived the
    import it was written for.
    """
    if not contract.ignore_imports:
        return _GraphView(graph), []

    edges = graph.edges()
    ignored: set[ImportEdge] = set()
    warnings: list[GuardIssue] = []
    for rule in contract.ignore_imports:
        matched = [e for e in edges if rule.matches(e)]
        if not matched:
            warnings.append(_unmatched_ignore(contract, rule))
        ignored.update(matched)
    return _GraphView(graph, frozenset(ignored)), warnings


def _unmatched_ignore(contract: Contract, rule: ImportRule) -> GuardIssue:
    return UnmatchedIgnoreWarning(
        f"ignore_imports rule '{rule}' of contract '{contract.name}' matched no import",
        context={"contract": contract.name, "rule": str(rule)},
    )


# ── Forbidden contracts ────────────────────────────────────────────


def shortest_paths(
    view: _GraphView, start: str, destinations: set[str]
) -> list[tuple[str, ...]]:
    """BFS from ``start``; one shortest path per reachable destination.

    The search does not continue past a destination: anything reachable only
    through it is already covered by the violation for that destination.
    Paths come back in the order their destinations were reached.
    """
    parents: dict[str, Optional[str]] = {start: None}
    queue: deque[str] = deque([start])
    found: list[tuple[str, ...]] = []

    while queue:
        node = queue.popleft()
        for nxt in view.successors(node):
            if nxt in parents:
                continue
            parents[nxt] = node
            if nxt in destinations:
                found.append(_trace(parents, nxt))
                continue
            queue.append(nxt)

    return found


def _trace(parents: dict[str, Optional[str]], end: str) -> tuple[str, ...]:
    path = [end]
    node = parents[end]
    while node is not None:
        path.append(node)
        node = parents[node]
    return tuple(reversed(path))


def evaluate_forbidden(graph: ModuleGraph, contract: ForbiddenContract) -> ContractResult:
    view, warnings = apply_ignores(graph, contract)
    result = ContractResult(contract=contract, warnings=warnings)

    sources = graph.find(lambda p: matches_any(contract.source_modules, p))
    destinations = set(graph.find(lambda p: matches_any(contract.destination_modules, p)))
    logger.debug(
        f"Contract '{contract.name}': {len(sources)} source modules, "
        f"{len(destinations)} destination modules"
    )
    if not sources or not destinations:
        return result

    for source in sources:
        if contract.allow_indirect_imports:
            paths = [
                (source, target)
                for target in view.successors(source)
                if target in destinations and target != source
            ]
        else:
            paths = shortest_paths(view, source, destinations - {source})

        for path in paths:
            result.violations.append(
                Violation(
                    contract=contract.name,
                    path=path,
                    explanation=_forbidden_explanation(path),
                )
            )

    return result


def _forbidden_explanation(path: tuple[str, ...]) -> str:
    if len(path) == 2:
        return f"{path[0]} imports {path[-1]}"
    via = len(path) - 2
    return f"{path[0]} imports {path[-1]} indirectly (via {via} module{'s' if via > 1 else ''})"


# ── Layers contracts ───────────────────────────────────────────────


def classify_modules(
    graph: ModuleGraph, contract: LayersContract
) -> tuple[dict[str, Module], list[GuardIssue]]:
    """Assign each module to exactly one layer of the contract.

    Returns:
        (path -> Module tagged with its layer, ambiguity warnings). Modules
        matching zero or several layers are left out and reported.
    """
    assignment: dict[str, Module] = {}
    warnings: list[GuardIssue] = []

    for module in graph.iter_modules():
        matching = contract.matching_layers(module.path)
        if len(matching) == 1:
            assignment[module.path] = module.with_layer(matching[0].name)
            continue

        if matching:
            names = [layer.name for layer in matching]
            message = f"{module.path} matches several layers ({', '.join(names)})"
        else:
            names = []
            message = f"{module.path} matches no layer"
        warnings.append(
            LayerAmbiguityError(
                f"{message} of contract '{contract.name}'; excluded from it",
                context={"contract": contract.name, "module": module.path, "layers": names},
            )
        )

    return assignment, warnings


def evaluate_layers(graph: ModuleGraph, contract: LayersContract) -> ContractResult:
    view, warnings = apply_ignores(graph, contract)
    assignment, ambiguity = classify_modules(graph, contract)
    result = ContractResult(
        contract=contract, warnings=warnings + ambiguity, layer_assignment=assignment
    )
    ranks = {layer.name: i for i, layer in enumerate(contract.layers)}

    for edge in view.edges():
        source = assignment.get(edge.source)
        target = assignment.get(edge.target)
        if source is None or target is None:
            continue
        if ranks[source.layer] < ranks[target.layer]:
            result.violations.append(
                Violation(
                    contract=contract.name,
                    path=(edge.source, edge.target),
                    explanation=(
                        f"{edge.source} (layer {source.layer}) imports "
                        f"{edge.target} (higher layer {target.layer})"
                    ),
                    source_layer=source.layer,
                    target_layer=target.layer,
                )
            )

    return result


# ── Dispatch ───────────────────────────────────────────────────────


def evaluate_contract(graph: ModuleGraph, contract: Contract) -> ContractResult:
    """Evaluate one contract; never raises.

    Any exception becomes an EvaluationError on the returned result.
    """
    try:
        if isinstance(contract, ForbiddenContract):
            return evaluate_forbidden(graph, contract)
        if isinstance(contract, LayersContract):
            return evaluate_layers(graph, contract)
        raise TypeError(f"unsupported contract type: {type(contract).__name__}")
    except Exception as e:
        logger.error(f"Evaluating contract '{contract.name}' failed: {e}")
        logger.debug(traceback.format_exc())
        return ContractResult(
            contract=contract,
            error=EvaluationError(
                f"Evaluating contract '{contract.name}' failed: {e}",
                context={"contract": contract.name, "exception": type(e).__name__},
            ),
        )


class ContractEvaluator:
    """Runs every contract against one graph.

    Results always come back in declaration order, whatever order the
    workers finish in.
    """

    def __init__(self, workers: Optional[int] = None):
        self.workers = workers

    def evaluate_all(
        self, graph: ModuleGraph, contracts: Sequence[Contract]
    ) -> list[ContractResult]:
        if not contracts:
            return []
        if self.workers == 1 or len(contracts) == 1:
            return [evaluate_contract(graph, c) for c in contracts]

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(evaluate_contract, graph, c) for c in contracts]
            return [f.result() for f in futures]
