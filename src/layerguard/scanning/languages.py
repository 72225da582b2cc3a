"""Import strategies: what counts as "a reference to another module" per language.

Each strategy knows two things about its language:
  1. How a source file maps to a dotted module path.
  2. How to pull the declared references out of a file's text, already
     resolved to canonical absolute module names.

Adding a language:
  1. Subclass ImportStrategy and implement extract().
  2. Register it in STRATEGIES below. The graph builder picks it up through
     the ``languages`` setting.
"""

from __future__ import annotations

import ast
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

from ..exceptions import InvalidConfigError, SourceParseError


@dataclass(frozen=True)
class Reference:
    """One declared reference from a source file.

    Attributes:
        raw: The reference as written (``..models``, ``./repo``)
        candidates: Absolute module names it may denote, most specific first
        line: 1-based line of the declaration
        relative: Whether it was written relative to the importing module
    """

    raw: str
    candidates: tuple[str, ...]
    line: int = 0
    relative: bool = False


class ImportStrategy(ABC):
    """Base class for per-language reference extraction."""

    name: str = ""
    extensions: tuple[str, ...] = ()
    # File stems that stand for their directory (``__init__``, ``index``)
    package_stems: tuple[str, ...] = ()

    def handles(self, rel_path: str) -> bool:
        return PurePosixPath(rel_path).suffix in self.extensions

    def module_name(self, rel_path: str) -> Optional[tuple[str, bool]]:
        """Map a root-relative posix path to ``(dotted_path, is_package)``.

        Returns None for files that cannot be named as a module (a stem with
        dots in it, a package initializer at the root, ...).
        """
        path = PurePosixPath(rel_path)
        if path.suffix not in self.extensions:
            return None

        parts = list(path.with_suffix("").parts)
        is_package = parts[-1] in self.package_stems
        if is_package:
            parts = parts[:-1]
        if not parts or not all(self._valid_segment(p) for p in parts):
            return None
        return ".".join(parts), is_package

    def _valid_segment(self, segment: str) -> bool:
        return bool(segment) and "." not in segment

    @abstractmethod
    def extract(self, content: str, module: str, is_package: bool) -> list[Reference]:
        """Extract references from a file's content.

        Raises:
            SourceParseError: If the content cannot be parsed
        """


def _package_of(module: str, is_package: bool) -> list[str]:
    """Dotted parts of the package a module lives in."""
    parts = module.split(".")
    return parts if is_package else parts[:-1]


class PythonStrategy(ImportStrategy):
    """Python imports via the standard ``ast`` module.

    Covers ``import a.b``, ``from a.b import c`` and relative imports of any
    level, wherever they appear (function bodies, ``if TYPE_CHECKING:``).
    """

    name = "python"
    extensions = (".py", ".pyi")
    package_stems = ("__init__",)

    def _valid_segment(self, segment: str) -> bool:
        return segment.isidentifier()

    def extract(self, content: str, module: str, is_package: bool) -> list[Reference]:
        try:
            tree = ast.parse(content, filename=module)
        except SyntaxError as e:
            raise SourceParseError(module, self.name, e.msg or "invalid syntax", e.lineno)
        except ValueError as e:
            # e.g. source code string cannot contain null bytes
            raise SourceParseError(module, self.name, str(e))

        references: list[Reference] = []
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    references.append(Reference(alias.name, (alias.name,), node.lineno))
            elif isinstance(node, ast.ImportFrom):
                references.extend(self._from_import(node, module, is_package))

        references.sort(key=lambda r: (r.line, r.raw, r.candidates))
        return references

    def _from_import(self, node: ast.ImportFrom, module: str, is_package: bool) -> list[Reference]:
        raw = "." * node.level + (node.module or "")

        if node.level:
            package = _package_of(module, is_package)
            up = node.level - 1
            if up >= len(package):
                # Relative import beyond the top-level package
                return [Reference(raw, (), node.lineno, relative=True)]
            base_parts = package[: len(package) - up]
            if node.module:
                base_parts = base_parts + node.module.split(".")
            base = ".".join(base_parts)
        else:
            base = node.module or ""

        refs = []
        for alias in node.names:
            if alias.name == "*":
                candidates: tuple[str, ...] = (base,)
            else:
                candidates = (f"{base}.{alias.name}" if base else alias.name, base)
            candidates = tuple(c for c in candidates if c)
            refs.append(Reference(raw, candidates, node.lineno, relative=bool(node.level)))
        return refs


_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT = re.compile(r"(^|\s)//.*$", re.MULTILINE)


class EcmaScriptStrategy(ImportStrategy):
    """JavaScript / TypeScript module references (regex based).

    ``./`` and ``../`` specifiers are resolved against the importing file.
    Bare specifiers are read as root-relative paths (``app/models/user``);
    third-party packages simply never resolve and are ignored as external.
    """

    name = "ecmascript"
    extensions = (".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts")
    package_stems = ("index",)

    import_patterns = [
        re.compile(r"""\bimport\s+(?:type\s+)?[^;'"()]*?\bfrom\s*['"]([^'"]+)['"]"""),
        re.compile(r"""\bimport\s*['"]([^'"]+)['"]"""),
        re.compile(r"""\bexport\s+[^;'"()]*?\bfrom\s*['"]([^'"]+)['"]"""),
        re.compile(r"""\brequire\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
        re.compile(r"""\bimport\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
    ]

    def extract(self, content: str, module: str, is_package: bool) -> list[Reference]:
        # Blank out comments but keep line numbers stable
        text = _BLOCK_COMMENT.sub(lambda m: "\n" * m.group(0).count("\n"), content)
        text = _LINE_COMMENT.sub(lambda m: m.group(1), text)

        found: dict[tuple[int, str], Reference] = {}
        for pattern in self.import_patterns:
            for match in pattern.finditer(text):
                specifier = match.group(1)
                line = text.count("\n", 0, match.start(1)) + 1
                ref = self._resolve(specifier, module, is_package, line)
                found.setdefault((line, specifier), ref)

        return [found[key] for key in sorted(found)]

    def _resolve(self, specifier: str, module: str, is_package: bool, line: int) -> Reference:
        relative = specifier == "." or specifier == ".." or specifier.startswith(("./", "../"))
        parts = _package_of(module, is_package) if relative else []

        for segment in specifier.split("/"):
            if segment in ("", "."):
                continue
            if segment == "..":
                if not parts:
                    return Reference(specifier, (), line, relative=relative)
                parts = parts[:-1]
            else:
                parts = parts + [segment]

        if parts:
            last = PurePosixPath(parts[-1])
            if last.suffix in self.extensions:
                parts[-1] = last.stem
            if parts[-1] in self.package_stems:
                parts = parts[:-1]

        if not parts or not all(self._valid_segment(p) for p in parts):
            return Reference(specifier, (), line, relative=relative)
        return Reference(specifier, (".".join(parts),), line, relative=relative)


STRATEGIES: dict[str, type[ImportStrategy]] = {
    "python": PythonStrategy,
    "ecmascript": EcmaScriptStrategy,
}

_ALIASES = {
    "javascript": "ecmascript",
    "typescript": "ecmascript",
    "js": "ecmascript",
    "ts": "ecmascript",
}


def available_strategies() -> list[str]:
    return sorted(STRATEGIES)


def get_strategy(name: str) -> ImportStrategy:
    """Instantiate the strategy registered under ``name`` (or an alias).

    Raises:
        InvalidConfigError: If no strategy has that name
    """
    key = _ALIASES.get(name.lower(), name.lower())
    cls = STRATEGIES.get(key)
    if cls is None:
        raise InvalidConfigError(
            "languages", name, f"unknown language; choose from {', '.join(available_strategies())}"
        )
    return cls()
