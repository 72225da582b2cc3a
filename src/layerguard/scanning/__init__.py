"""Source discovery and per-language import extraction."""

from .cache import ImportCache
from .languages import (
    STRATEGIES,
    EcmaScriptStrategy,
    ImportStrategy,
    PythonStrategy,
    Reference,
    available_strategies,
    get_strategy,
)
from .walker import SourceWalker, validate_root

__all__ = [
    "ImportCache",
    "ImportStrategy",
    "PythonStrategy",
    "EcmaScriptStrategy",
    "Reference",
    "STRATEGIES",
    "available_strategies",
    "get_strategy",
    "SourceWalker",
    "validate_root",
]
