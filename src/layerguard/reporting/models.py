"""Report model shared by every output format."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from ..contracts.evaluator import ContractResult
from ..exceptions import GuardIssue


class Status(Enum):
    PASS = "pass"
    FAIL = "fail"


@dataclass
class CheckReport:
    """Aggregate outcome of one ``check`` run.

    Contract results keep declaration order. Warnings are carried along but
    never decide the status: a run passes iff no contract has a violation or
    an evaluation error.

    Attributes:
        root: Scanned root directory
        results: One ContractResult per contract, in declaration order
        scan_warnings: Issues from building the graph
        module_count: Modules in the graph
        edge_count: Edges in the graph
        duration_seconds: Wall time of scan + evaluation
    """

    root: Path
    results: list[ContractResult] = field(default_factory=list)
    scan_warnings: list[GuardIssue] = field(default_factory=list)
    module_count: int = 0
    edge_count: int = 0
    duration_seconds: float = 0.0

    @property
    def status(self) -> Status:
        if any(r.violations or r.error is not None for r in self.results):
            return Status.FAIL
        return Status.PASS

    @property
    def passed(self) -> bool:
        return self.status is Status.PASS

    @property
    def violation_count(self) -> int:
        return sum(len(r.violations) for r in self.results)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if r.error is not None)

    @property
    def warning_count(self) -> int:
        return len(self.scan_warnings) + sum(len(r.warnings) for r in self.results)

    def to_dict(self) -> dict[str, Any]:
        """Structured form of the report; every renderer reads from this."""
        return {
            "status": self.status.value,
            "root": str(self.root),
            "contracts": [_result_to_dict(r) for r in self.results],
            "warnings": [w.to_json() for w in self.scan_warnings],
            "summary": {
                "modules": self.module_count,
                "edges": self.edge_count,
                "contracts": len(self.results),
                "violations": self.violation_count,
                "errors": self.error_count,
                "warnings": self.warning_count,
                "duration_seconds": round(self.duration_seconds, 3),
            },
        }


def _result_to_dict(result: ContractResult) -> dict[str, Any]:
    contract = result.contract
    return {
        "name": contract.name,
        "type": contract.type.value,
        "status": result.status,
        "description": contract.describe(),
        "violations": [v.to_json() for v in result.violations],
        "warnings": [w.to_json() for w in result.warnings],
        "error": result.error.to_json() if result.error is not None else None,
    }
