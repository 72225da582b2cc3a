"""Configuration loading and management for Layerguard.

A single contract file carries both the contracts and the run settings.
Settings sources are merged in priority order:
    1. Defaults (defined in GuardConfig / ScanConfig / CacheConfig)
    2. The ``[settings]`` table of the contract file
    3. Environment variables (LAYERGUARD_* prefix, plus MAX_WORKERS)
    4. CLI overrides (passed as kwargs)

Example:
    >>> raw = load_config_file(Path("layerguard.toml"))
    >>> config = load_settings(raw.get("settings"), workers=4)
    >>> config.workers
    4
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ContractConfigError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

DEFAULT_EXCLUDE_PATTERNS = [
    ".git",
    ".hg",
    ".tox",
    ".nox",
    ".venv",
    "venv",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    "node_modules",
    "build",
    "dist",
    "*.egg-info",
    ".eggs",
]


@dataclass(frozen=True)
class ScanConfig:
    """What the graph builder walks.

    Attributes:
        root_packages: Top-level packages to keep (empty = every package found)
        include_patterns: Globs a file's relative path must match (empty = all)
        exclude_patterns: Globs pruning files and directories (path or name)
        allow_hidden_files: Include files/directories starting with "."
        follow_symlinks: Follow symbolic links (cycles are detected and skipped)
        max_files: Stop the walk after this many source files
        max_file_size_mb: Skip larger files
        scan_timeout_seconds: Abort the scan (ScanError) past this bound
    """

    root_packages: list[str] = field(default_factory=list)
    include_patterns: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    allow_hidden_files: bool = False
    follow_symlinks: bool = False
    max_files: int = 50000
    max_file_size_mb: float = 10.0
    scan_timeout_seconds: int = 300

    def __post_init__(self) -> None:
        if self.max_files < 1:
            raise ValueError("max_files must be at least 1")
        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")
        if self.scan_timeout_seconds < 1:
            raise ValueError("scan_timeout_seconds must be at least 1")

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)


@dataclass(frozen=True)
class CacheConfig:
    """Opt-in on-disk cache of extracted imports."""

    enabled: bool = False
    directory: str = ".layerguard-cache"
    ttl_hours: int = 24

    def __post_init__(self) -> None:
        if self.ttl_hours < 0:
            raise ValueError("ttl_hours must be non-negative")


@dataclass(frozen=True)
class GuardConfig:
    """Run configuration, composed from named sub-configs.

    Attributes:
        languages: Import strategies to scan with (see scanning.languages)
        workers: Parallelism bound for parsing and evaluation (None = auto)
        verbosity: Logging verbosity level
        scan: File discovery settings
        cache: Import cache settings
    """

    languages: list[str] = field(default_factory=lambda: ["python"])
    workers: Optional[int] = None
    verbosity: Verbosity = "normal"
    scan: ScanConfig = field(default_factory=ScanConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    def __post_init__(self) -> None:
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if not self.languages:
            raise ValueError("languages must name at least one strategy")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError(f"verbosity must be quiet, normal or verbose, got {self.verbosity!r}")


DEFAULT_CONFIG = GuardConfig()


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a contract file (TOML or JSON) into a plain dict.

    A pyproject-style ``[tool.layerguard]`` table is unwrapped.

    Raises:
        ContractConfigError: If the file is missing or cannot be parsed
    """
    if not path.exists():
        raise ContractConfigError("config file not found", source=path)
    if not path.is_file():
        raise ContractConfigError("config path is not a file", source=path)

    try:
        if path.suffix.lower() == ".json":
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        else:
            data = _load_toml_file(path)
    except ContractConfigError:
        raise
    except Exception as e:
        raise ContractConfigError(f"cannot parse config file: {e}", source=path)

    if not isinstance(data, dict):
        raise ContractConfigError("config file must contain a table/object", source=path)

    tool_section = data.get("tool")
    if isinstance(tool_section, dict) and isinstance(tool_section.get("layerguard"), dict):
        data = tool_section["layerguard"]

    return data


def load_settings(raw: Optional[dict[str, Any]] = None, **overrides: Any) -> GuardConfig:
    """Build a validated GuardConfig from file settings, env and overrides.

    Args:
        raw: The ``settings`` table of the contract file (may be None)
        **overrides: Direct overrides (typically from CLI flags). ``scan`` and
            ``cache`` overrides are dicts merged into the sub-config.

    Returns:
        Validated GuardConfig instance

    Raises:
        InvalidConfigError: On unknown keys or invalid values
    """
    if raw is not None and not isinstance(raw, dict):
        raise InvalidConfigError("settings", raw, "settings must be a table")

    merged: dict[str, Any] = dict(raw or {})
    scan_section = _as_section(merged.pop("scan", None), "scan")
    cache_section = _as_section(merged.pop("cache", None), "cache")

    env = _load_env_vars()
    merged.update(env["top"])
    scan_section.update(env["scan"])
    cache_section.update(env["cache"])

    # Verbosity booleans from the CLI
    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    scan_section.update(_as_section(overrides.pop("scan", None), "scan"))
    cache_section.update(_as_section(overrides.pop("cache", None), "cache"))
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        scan = ScanConfig(**scan_section)
    except (TypeError, ValueError) as e:
        raise InvalidConfigError("settings.scan", scan_section, str(e))
    try:
        cache = CacheConfig(**cache_section)
    except (TypeError, ValueError) as e:
        raise InvalidConfigError("settings.cache", cache_section, str(e))
    try:
        return GuardConfig(scan=scan, cache=cache, **merged)
    except (TypeError, ValueError) as e:
        raise InvalidConfigError("settings", merged, str(e))


def _as_section(value: Any, key: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidConfigError(f"settings.{key}", value, "must be a table")
    return dict(value)


def _load_env_vars() -> dict[str, dict[str, Any]]:
    """Load configuration from environment variables.

    Top-level fields read ``LAYERGUARD_<FIELD>``, scan fields read
    ``LAYERGUARD_<FIELD>`` as well, cache fields read ``LAYERGUARD_CACHE_<FIELD>``.
    ``MAX_WORKERS`` is accepted as an alias for ``LAYERGUARD_WORKERS``.

    Returns:
        Dict with "top", "scan" and "cache" sub-dicts of parsed values.
    """
    result: dict[str, dict[str, Any]] = {"top": {}, "scan": {}, "cache": {}}

    max_workers = os.environ.get("MAX_WORKERS")
    if max_workers is not None:
        try:
            result["top"]["workers"] = int(max_workers)
        except ValueError:
            raise InvalidConfigError("MAX_WORKERS", max_workers, "expected an integer")

    for section, cls, prefix in (
        ("top", GuardConfig, "LAYERGUARD_"),
        ("scan", ScanConfig, "LAYERGUARD_"),
        ("cache", CacheConfig, "LAYERGUARD_CACHE_"),
    ):
        type_hints = get_type_hints(cls)
        for f in fields(cls):
            if f.name in ("scan", "cache"):
                continue
            env_key = f"{prefix}{f.name.upper()}"
            env_value = os.environ.get(env_key)
            if env_value is None:
                continue
            try:
                parsed = _parse_env_value(env_value, type_hints[f.name])
            except ValueError as e:
                raise InvalidConfigError(env_key, env_value, str(e))
            if parsed is not None:
                result[section][f.name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Lists are read as comma-separated values.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is list or type_hint is list:
        return [item.strip() for item in value.split(",") if item.strip()]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        # Fallback to tomli for Python 3.9-3.10
        import tomli as tomllib  # type: ignore

    with open(path, "rb") as f:
        return tomllib.load(f)
