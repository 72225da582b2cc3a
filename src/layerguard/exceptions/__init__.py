"""Exception hierarchy for Layerguard."""

from .base import LayerguardError
from .config import ContractConfigError, InvalidConfigError
from .scanning import ScanError, SourceParseError
from .taxonomy import (
    ErrorCode,
    EvaluationError,
    GuardIssue,
    LayerAmbiguityError,
    ParseWarning,
    SymlinkCycleWarning,
    UnmatchedIgnoreWarning,
    UnresolvedImportWarning,
)

__all__ = [
    "LayerguardError",
    "ScanError",
    "SourceParseError",
    "ContractConfigError",
    "InvalidConfigError",
    "ErrorCode",
    "GuardIssue",
    "ParseWarning",
    "UnresolvedImportWarning",
    "SymlinkCycleWarning",
    "LayerAmbiguityError",
    "UnmatchedIgnoreWarning",
    "EvaluationError",
]
