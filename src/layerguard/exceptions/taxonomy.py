"""Error taxonomy for non-fatal conditions collected into the report.

Error Code Convention:
    LG1xx - Scanning issues (graph builder)
    LG2xx - Contract issues (classification, configuration hygiene)
    LG3xx - Evaluation issues

Nothing in this module aborts a run. Issues are raised inside a narrow
scope, caught, and attached to the graph or a contract result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Structured issue codes for reports and logs."""

    # Scanning (LG1xx)
    LG101 = "LG101"  # Source file could not be parsed
    LG102 = "LG102"  # Internal-looking import did not resolve
    LG103 = "LG103"  # Symlink cycle skipped

    # Contracts (LG2xx)
    LG201 = "LG201"  # Module matches zero or several layers
    LG202 = "LG202"  # ignore_imports rule matched no edge

    # Evaluation (LG3xx)
    LG301 = "LG301"  # Contract evaluation raised


@dataclass
class GuardIssue(Exception):
    """Base issue with structured context.

    Attributes:
        message: Human-readable description
        code: Structured issue code
        context: Extra data (module, file, line, ...)
        recoverable: Always True for collected issues
        recovery_hint: Suggested fix for the user
    """

    message: str
    code: ErrorCode = ErrorCode.LG101
    context: dict[str, Any] = field(default_factory=dict)
    recoverable: bool = True
    recovery_hint: str | None = None

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __post_init__(self) -> None:
        super().__init__(str(self))

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_json(self) -> dict[str, Any]:
        """Structured report format."""
        return {
            "kind": self.kind,
            "code": self.code.value,
            "message": self.message,
            "context": self.context,
            "recovery_hint": self.recovery_hint,
        }


@dataclass
class ParseWarning(GuardIssue):
    """A source file could not be parsed; its edges were skipped (LG101)."""

    code: ErrorCode = ErrorCode.LG101
    recovery_hint: str | None = "Fix the syntax error or exclude the file from the scan."


@dataclass
class UnresolvedImportWarning(GuardIssue):
    """An in-project reference names no module under the root (LG102)."""

    code: ErrorCode = ErrorCode.LG102
    recovery_hint: str | None = "Check the import, or widen the scan root / include patterns."


@dataclass
class SymlinkCycleWarning(GuardIssue):
    """A followed symlink led back to an already visited directory (LG103)."""

    code: ErrorCode = ErrorCode.LG103


@dataclass
class LayerAmbiguityError(GuardIssue):
    """A module matches zero or more than one layer of a layers contract (LG201).

    The module is left out of that contract's evaluation.
    """

    code: ErrorCode = ErrorCode.LG201
    recovery_hint: str | None = "Make the layer patterns cover each module exactly once."


@dataclass
class UnmatchedIgnoreWarning(GuardIssue):
    """An ignore_imports rule did not match any edge in the graph (LG202)."""

    code: ErrorCode = ErrorCode.LG202
    recovery_hint: str | None = "Remove the stale ignore rule."


@dataclass
class EvaluationError(GuardIssue):
    """Evaluating one contract failed; other contracts are unaffected (LG301)."""

    code: ErrorCode = ErrorCode.LG301
    recoverable: bool = False
