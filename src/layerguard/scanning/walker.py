"""Source tree discovery.

Walks the scan root in sorted order so the list of discovered files never
depends on the order the filesystem hands entries back. Symlinked
directories are skipped unless explicitly followed; when followed, each
directory's real identity is remembered so a cycle is reported once and
never entered.
"""

import os
import time
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable

from ..config import ScanConfig
from ..exceptions import ScanError, SymlinkCycleWarning
from ..logging_config import get_logger

logger = get_logger(__name__)


def validate_root(path: Path) -> Path:
    """Check that a scan root exists and can be read.

    Returns:
        Resolved absolute path

    Raises:
        ScanError: If the root is missing, not a directory or unreadable
    """
    try:
        resolved = path.resolve()
    except (OSError, RuntimeError) as e:
        raise ScanError(path, f"cannot resolve path: {e}")

    if not resolved.exists():
        raise ScanError(resolved, "directory does not exist")
    if not resolved.is_dir():
        raise ScanError(resolved, "path is not a directory")
    if not os.access(resolved, os.R_OK | os.X_OK):
        raise ScanError(resolved, "directory is not readable")

    return resolved


def matches_any(rel_path: str, patterns: Iterable[str]) -> bool:
    """Glob-match a relative posix path, or its last component, against patterns."""
    name = rel_path.rsplit("/", 1)[-1]
    return any(fnmatchcase(rel_path, p) or fnmatchcase(name, p) for p in patterns)


class SourceWalker:
    """Collects candidate source files under a root.

    Attributes:
        warnings: Symlink cycles met during the walk
        skipped: Number of files dropped by filters or limits
    """

    def __init__(self, root: Path, scan: ScanConfig, extensions: Iterable[str]):
        self.root = root
        self.scan = scan
        self.extensions = frozenset(extensions)
        self.warnings: list[SymlinkCycleWarning] = []
        self.skipped = 0

    def walk(self) -> list[str]:
        """Return root-relative posix paths of source files, sorted.

        Raises:
            ScanError: If the walk exceeds the configured time bound
        """
        root = validate_root(self.root)
        deadline = time.monotonic() + self.scan.scan_timeout_seconds
        visited: set[tuple[int, int]] = set()
        if self.scan.follow_symlinks:
            st = root.stat()
            visited.add((st.st_dev, st.st_ino))

        files: list[str] = []
        for dirpath, dirnames, filenames in os.walk(
            root, followlinks=self.scan.follow_symlinks, onerror=self._on_error
        ):
            if time.monotonic() > deadline:
                raise ScanError(
                    root, f"scan exceeded {self.scan.scan_timeout_seconds}s time bound"
                )

            rel_dir = Path(dirpath).relative_to(root).as_posix()
            rel_dir = "" if rel_dir == "." else rel_dir

            # Prune in place; os.walk descends in the order left in dirnames
            dirnames[:] = [
                d for d in sorted(dirnames) if self._keep_dir(Path(dirpath) / d, rel_dir, d, visited)
            ]

            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if not self._keep_file(Path(dirpath) / filename, rel_path):
                    continue
                if len(files) >= self.scan.max_files:
                    logger.warning(f"Reached max files limit ({self.scan.max_files})")
                    return sorted(files)
                files.append(rel_path)

        logger.debug(f"Walk complete: {len(files)} source files, {self.skipped} skipped")
        return sorted(files)

    def _keep_dir(
        self, full: Path, rel_dir: str, name: str, visited: set[tuple[int, int]]
    ) -> bool:
        rel_path = f"{rel_dir}/{name}" if rel_dir else name
        if not self.scan.allow_hidden_files and name.startswith("."):
            return False
        if matches_any(rel_path, self.scan.exclude_patterns):
            logger.debug(f"Excluded directory: {rel_path}")
            return False

        if full.is_symlink():
            if not self.scan.follow_symlinks:
                logger.debug(f"Skipped symlinked directory: {rel_path}")
                return False
        if self.scan.follow_symlinks:
            try:
                st = full.stat()
            except OSError as e:
                logger.warning(f"Cannot stat {rel_path}: {e}")
                return False
            key = (st.st_dev, st.st_ino)
            if key in visited:
                self.warnings.append(
                    SymlinkCycleWarning(
                        f"{rel_path} leads to an already visited directory; skipped",
                        context={"path": rel_path, "target": str(full.resolve())},
                    )
                )
                logger.debug(f"Symlink cycle skipped: {rel_path}")
                return False
            visited.add(key)
        return True

    def _keep_file(self, full: Path, rel_path: str) -> bool:
        name = full.name
        if full.suffix not in self.extensions:
            return False
        if not self.scan.allow_hidden_files and name.startswith("."):
            self.skipped += 1
            return False
        if full.is_symlink() and not self.scan.follow_symlinks:
            self.skipped += 1
            return False
        if matches_any(rel_path, self.scan.exclude_patterns):
            self.skipped += 1
            return False
        if self.scan.include_patterns and not any(
            fnmatchcase(rel_path, p) for p in self.scan.include_patterns
        ):
            self.skipped += 1
            return False

        try:
            size = full.stat().st_size
        except OSError as e:
            logger.warning(f"Cannot stat {rel_path}: {e}")
            self.skipped += 1
            return False
        if size > self.scan.max_file_size_bytes:
            logger.debug(f"Skipped (size): {rel_path} ({size} bytes)")
            self.skipped += 1
            return False
        return True

    def _on_error(self, error: OSError) -> None:
        logger.warning(f"Cannot read directory {getattr(error, 'filename', '?')}: {error}")
