"""Contract parsing and validation.

Turns the ``contracts`` records of a config file into validated Contract
objects. Everything wrong with a record is a ContractConfigError, which the
CLI maps to exit code 2 before any evaluation happens.

Record shapes:

    {name, type: "forbidden", source_modules: [...], destination_modules: [...],
     ignore_imports?: ["a -> b", ...], allow_indirect_imports?: bool}

    {name, type: "layers", layers: [pattern | {name, modules: [...]}, ...],
     order?: "high_to_low" | "low_to_high", ignore_imports?: [...]}

Layers default to ``high_to_low``: the first layer listed is the highest,
as in import-linter configuration files.
"""

from pathlib import Path
from typing import Any, Optional

from ..exceptions import ContractConfigError
from .models import (
    Contract,
    ContractType,
    ForbiddenContract,
    ImportRule,
    Layer,
    LayersContract,
    ModulePattern,
)

LAYER_ORDERS = ("high_to_low", "low_to_high")

_COMMON_KEYS = {"name", "type", "ignore_imports"}
_ALLOWED_KEYS = {
    ContractType.FORBIDDEN: _COMMON_KEYS
    | {"source_modules", "destination_modules", "allow_indirect_imports"},
    ContractType.LAYERS: _COMMON_KEYS | {"layers", "order"},
}


def parse_contracts(records: Any, source: Optional[Path] = None) -> list[Contract]:
    """Validate contract records and build Contract objects, in declaration order.

    Raises:
        ContractConfigError: On any malformed record, or if there are none
    """
    if records is None:
        raise ContractConfigError("no contracts defined", source=source)
    if isinstance(records, dict) or not isinstance(records, (list, tuple)):
        raise ContractConfigError("'contracts' must be a list of tables", source=source)
    if not records:
        raise ContractConfigError("no contracts defined", source=source)

    contracts: list[Contract] = []
    seen: set[str] = set()
    for index, record in enumerate(records):
        contract = parse_contract(record, index=index, source=source)
        if contract.name in seen:
            raise ContractConfigError("duplicate contract name", contract=contract.name, source=source)
        seen.add(contract.name)
        contracts.append(contract)
    return contracts


def parse_contract(record: Any, index: int = 0, source: Optional[Path] = None) -> Contract:
    """Validate one record.

    Raises:
        ContractConfigError: If the record is malformed
    """
    if not isinstance(record, dict):
        raise ContractConfigError(f"contract #{index + 1} must be a table", source=source)

    name = record.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ContractConfigError(f"contract #{index + 1} needs a non-empty 'name'", source=source)
    name = name.strip()

    def fail(reason: str) -> ContractConfigError:
        return ContractConfigError(reason, contract=name, source=source)

    raw_type = record.get("type")
    try:
        contract_type = ContractType(raw_type)
    except ValueError:
        known = ", ".join(t.value for t in ContractType)
        raise fail(f"unrecognized type {raw_type!r} (expected one of: {known})")

    unknown = sorted(set(record) - _ALLOWED_KEYS[contract_type])
    if unknown:
        raise fail(f"unknown keys for a {contract_type.value} contract: {', '.join(unknown)}")

    ignore_imports = _parse_ignores(record.get("ignore_imports", []), fail)

    if contract_type is ContractType.FORBIDDEN:
        allow_indirect = record.get("allow_indirect_imports", False)
        if not isinstance(allow_indirect, bool):
            raise fail("'allow_indirect_imports' must be true or false")
        return ForbiddenContract(
            name=name,
            source_modules=_parse_patterns(record.get("source_modules"), "source_modules", fail),
            destination_modules=_parse_patterns(
                record.get("destination_modules"), "destination_modules", fail
            ),
            ignore_imports=ignore_imports,
            allow_indirect_imports=allow_indirect,
        )

    return LayersContract(
        name=name,
        layers=_parse_layers(record.get("layers"), record.get("order", "high_to_low"), fail),
        ignore_imports=ignore_imports,
    )


def _parse_patterns(values: Any, key: str, fail) -> tuple[ModulePattern, ...]:
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple)) or not values:
        raise fail(f"'{key}' must be a non-empty list of module patterns")

    patterns: list[ModulePattern] = []
    for value in values:
        try:
            pattern = ModulePattern.parse(value)
        except ValueError as e:
            raise fail(f"{key}: {e}")
        if pattern not in patterns:
            patterns.append(pattern)
    return tuple(patterns)


def _parse_ignores(values: Any, fail) -> tuple[ImportRule, ...]:
    if not isinstance(values, (list, tuple)):
        raise fail("'ignore_imports' must be a list of 'importer -> imported' strings")
    rules = []
    for value in values:
        try:
            rules.append(ImportRule.parse(value))
        except ValueError as e:
            raise fail(f"ignore_imports: {e}")
    return tuple(rules)


def _parse_layers(values: Any, order: Any, fail) -> tuple[Layer, ...]:
    if order not in LAYER_ORDERS:
        raise fail(f"'order' must be one of {', '.join(LAYER_ORDERS)}, got {order!r}")
    if not isinstance(values, (list, tuple)) or len(values) < 2:
        raise fail("a layers contract needs at least 2 layers")

    layers: list[Layer] = []
    for value in values:
        layer = _parse_layer(value, fail)
        if any(existing.name == layer.name for existing in layers):
            raise fail(f"duplicate layer {layer.name!r}")
        layers.append(layer)

    if order == "high_to_low":
        layers.reverse()
    return tuple(layers)


def _parse_layer(value: Any, fail) -> Layer:
    if isinstance(value, str):
        patterns = _parse_patterns([value], "layers", fail)
        return Layer(name=value.strip(), patterns=patterns)

    if isinstance(value, dict):
        name = value.get("name")
        if not isinstance(name, str) or not name.strip():
            raise fail("each layer table needs a non-empty 'name'")
        unknown = sorted(set(value) - {"name", "modules"})
        if unknown:
            raise fail(f"unknown keys for layer {name!r}: {', '.join(unknown)}")
        patterns = _parse_patterns(value.get("modules"), f"layers.{name}.modules", fail)
        return Layer(name=name.strip(), patterns=patterns)

    raise fail("each layer must be a module pattern or a {name, modules} table")
