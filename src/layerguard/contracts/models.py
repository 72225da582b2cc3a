"""Contract models.

A contract is a tagged variant: either a ForbiddenContract (no path from
source modules to destination modules) or a LayersContract (no import from
a lower layer to a higher one). Patterns are purely structural on the
dotted module path.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from ..graph.models import ImportEdge


class ContractType(Enum):
    """Supported contract kinds."""

    FORBIDDEN = "forbidden"
    LAYERS = "layers"


@dataclass(frozen=True)
class ModulePattern:
    """An exact module path, or a prefix wildcard.

    ``pkg.*`` matches ``pkg`` itself and every descendant of it.
    """

    expression: str

    @classmethod
    def parse(cls, expression: Any) -> "ModulePattern":
        """Validate and build a pattern.

        Raises:
            ValueError: For empty patterns, empty segments or misplaced wildcards
        """
        if not isinstance(expression, str):
            raise ValueError(f"pattern must be a string, got {type(expression).__name__}")
        text = expression.strip()
        if not text:
            raise ValueError("pattern must not be empty")

        segments = text.split(".")
        if any(not s for s in segments):
            raise ValueError(f"pattern {text!r} has an empty segment")
        for i, segment in enumerate(segments):
            if segment == "*" and i == len(segments) - 1 and i > 0:
                continue
            if any(ch in segment for ch in "*?[]"):
                raise ValueError(f"pattern {text!r}: only a trailing '.*' wildcard is allowed")
        return cls(text)

    @property
    def is_wildcard(self) -> bool:
        return self.expression.endswith(".*")

    @property
    def prefix(self) -> str:
        return self.expression[:-2] if self.is_wildcard else self.expression

    def matches(self, path: str) -> bool:
        if self.is_wildcard:
            prefix = self.prefix
            return path == prefix or path.startswith(prefix + ".")
        return path == self.expression

    def __str__(self) -> str:
        return self.expression


def matches_any(patterns: tuple[ModulePattern, ...], path: str) -> bool:
    return any(p.matches(path) for p in patterns)


@dataclass(frozen=True)
class ImportRule:
    """An ``importer -> imported`` pair of patterns (used by ignore_imports)."""

    source: ModulePattern
    target: ModulePattern

    @classmethod
    def parse(cls, expression: Any) -> "ImportRule":
        """Parse ``"a.b -> c.*"``.

        Raises:
            ValueError: If the expression is not two patterns joined by ``->``
        """
        if not isinstance(expression, str) or expression.count("->") != 1:
            raise ValueError(f"expected 'importer -> imported', got {expression!r}")
        source, target = expression.split("->")
        return cls(ModulePattern.parse(source), ModulePattern.parse(target))

    def matches(self, edge: ImportEdge) -> bool:
        return self.source.matches(edge.source) and self.target.matches(edge.target)

    def __str__(self) -> str:
        return f"{self.source} -> {self.target}"


@dataclass(frozen=True)
class Layer:
    """A named tier of a layers contract."""

    name: str
    patterns: tuple[ModulePattern, ...]

    def matches(self, path: str) -> bool:
        return matches_any(self.patterns, path)


@dataclass(frozen=True)
class ForbiddenContract:
    """No module matching ``source_modules`` may reach one matching ``destination_modules``.

    The check is transitive unless ``allow_indirect_imports`` is set.
    """

    name: str
    source_modules: tuple[ModulePattern, ...]
    destination_modules: tuple[ModulePattern, ...]
    ignore_imports: tuple[ImportRule, ...] = ()
    allow_indirect_imports: bool = False

    type: ClassVar[ContractType] = ContractType.FORBIDDEN

    def describe(self) -> str:
        sources = ", ".join(map(str, self.source_modules))
        destinations = ", ".join(map(str, self.destination_modules))
        return f"{sources} must not import {destinations}"


@dataclass(frozen=True)
class LayersContract:
    """Lower layers may never import higher ones.

    ``layers`` is stored lowest first whatever order the file used.
    """

    name: str
    layers: tuple[Layer, ...]
    ignore_imports: tuple[ImportRule, ...] = ()

    type: ClassVar[ContractType] = ContractType.LAYERS

    def rank(self, layer_name: str) -> int:
        for i, layer in enumerate(self.layers):
            if layer.name == layer_name:
                return i
        raise KeyError(layer_name)

    def matching_layers(self, path: str) -> list[Layer]:
        return [layer for layer in self.layers if layer.matches(path)]

    def describe(self) -> str:
        return " < ".join(layer.name for layer in self.layers)


Contract = Union[ForbiddenContract, LayersContract]


@dataclass(frozen=True)
class Violation:
    """A contract broken by a concrete, edge-connected path."""

    contract: str
    path: tuple[str, ...]
    explanation: str
    source_layer: Optional[str] = None
    target_layer: Optional[str] = None

    @property
    def source(self) -> str:
        return self.path[0]

    @property
    def target(self) -> str:
        return self.path[-1]

    @property
    def is_direct(self) -> bool:
        return len(self.path) == 2

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "source": self.source,
            "target": self.target,
            "path": list(self.path),
            "explanation": self.explanation,
        }
        if self.source_layer is not None:
            data["source_layer"] = self.source_layer
            data["target_layer"] = self.target_layer
        return data

    def __str__(self) -> str:
        return " -> ".join(self.path)
