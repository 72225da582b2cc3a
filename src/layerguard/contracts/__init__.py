"""Contracts: models, config parsing and evaluation."""

from .evaluator import (
    ContractEvaluator,
    ContractResult,
    classify_modules,
    evaluate_contract,
    evaluate_forbidden,
    evaluate_layers,
)
from .models import (
    Contract,
    ContractType,
    ForbiddenContract,
    ImportRule,
    Layer,
    LayersContract,
    ModulePattern,
    Violation,
)
from .parser import parse_contract, parse_contracts

__all__ = [
    "Contract",
    "ContractType",
    "ForbiddenContract",
    "LayersContract",
    "Layer",
    "ModulePattern",
    "ImportRule",
    "Violation",
    "parse_contract",
    "parse_contracts",
    "ContractEvaluator",
    "ContractResult",
    "classify_modules",
    "evaluate_contract",
    "evaluate_forbidden",
    "evaluate_layers",
]
