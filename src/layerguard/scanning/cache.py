"""
Import cache for Layerguard.

Uses diskcache for SQLite-based persistent caching of extracted references.
Off unless explicitly enabled: a plain run never touches the disk beyond
reading sources.
"""

import hashlib
from pathlib import Path
from typing import Any, Optional

from diskcache import Cache

from .. import __version__
from ..config import CacheConfig
from ..logging_config import get_logger
from .languages import Reference

logger = get_logger(__name__)


class ImportCache:
    """
    Per-file cache of extracted references.

    Keys combine the file path, its modification time and size, the strategy
    name, the tool version and the module the file was scanned as. Relative
    imports are resolved against that module, so the same file scanned from
    a different root gets its own entry.
    """

    def __init__(
        self,
        cache_dir: str = ".layerguard-cache",
        ttl_hours: int = 24,
        enabled: bool = True,
    ):
        self.enabled = enabled
        self.ttl_seconds = ttl_hours * 3600

        if self.enabled:
            self.cache: Optional[Cache] = Cache(cache_dir)
            logger.debug(f"Import cache initialized at {cache_dir} with TTL={ttl_hours}h")
        else:
            self.cache = None
            logger.debug("Import cache disabled")

    @classmethod
    def from_config(cls, config: CacheConfig) -> "ImportCache":
        return cls(cache_dir=config.directory, ttl_hours=config.ttl_hours, enabled=config.enabled)

    def file_key(
        self, filepath: Path, strategy: str, module: str, is_package: bool
    ) -> Optional[str]:
        """Cache key from file metadata and module identity; None if the file cannot be stat'ed."""
        try:
            stat = filepath.stat()
        except OSError:
            return None
        key_data = (
            f"{__version__}:{strategy}:{module}:{int(is_package)}:"
            f"{filepath}:{stat.st_mtime_ns}:{stat.st_size}"
        )
        return hashlib.sha256(key_data.encode()).hexdigest()

    def get(self, key: str) -> Optional[list[Reference]]:
        if not self.enabled or self.cache is None:
            return None

        try:
            value = self.cache.get(key)
        except Exception as e:
            logger.warning(f"Cache get failed: {e}")
            return None
        if value is not None:
            logger.debug(f"Cache hit: {key[:16]}...")
        return value

    def set(self, key: str, value: list[Reference]) -> None:
        if not self.enabled or self.cache is None:
            return

        try:
            self.cache.set(key, value, expire=self.ttl_seconds or None)
        except Exception as e:
            logger.warning(f"Cache set failed: {e}")

    def clear(self) -> int:
        """Clear all entries; returns the number removed."""
        if not self.enabled or self.cache is None:
            return 0

        removed = self.cache.clear()
        logger.info("Import cache cleared")
        return removed

    def stats(self) -> dict[str, Any]:
        if not self.enabled or self.cache is None:
            return {"enabled": False}

        return {
            "enabled": True,
            "size": len(self.cache),
            "directory": self.cache.directory,
            "volume": self.cache.volume(),
        }

    def close(self) -> None:
        if self.cache is not None:
            self.cache.close()

    def __enter__(self) -> "ImportCache":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
