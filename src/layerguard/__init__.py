"""
Layerguard - Architectural Import Boundary Checker

Builds the import graph of a source tree and checks it against declared
contracts: forbidden imports (direct or transitive) and strict layering.
Meant to run as a CI stage: exit 0 when every contract is kept, 1 on
violations, 2 on configuration or scan errors.
"""

__version__ = "0.1.0"

from .api import check, load_project, run_check
from .contracts import Contract, ContractResult, Violation
from .graph import ModuleGraph, build_graph
from .reporting import CheckReport, Status

__all__ = [
    "check",  # Main entry point
    "load_project",
    "run_check",
    "build_graph",
    "ModuleGraph",
    "Contract",
    "ContractResult",
    "Violation",
    "CheckReport",
    "Status",
]
