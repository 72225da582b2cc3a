"""Scan-related exceptions: root access, walk limits, source parsing."""

from pathlib import Path
from typing import Optional

from .base import LayerguardError


class ScanError(LayerguardError):
    """Raised when the source tree cannot be scanned at all.

    Always fatal: the pipeline stops before evaluation.
    """

    def __init__(self, root: Path, reason: str):
        super().__init__(f"Cannot scan {root}", root=root, reason=reason)
        self.root = root
        self.reason = reason


class SourceParseError(LayerguardError):
    """Raised by an import strategy when a file cannot be parsed.

    The graph builder turns this into a ParseWarning for the module.
    """

    def __init__(self, filepath: str, language: str, reason: str, line: Optional[int] = None):
        super().__init__(
            f"Failed to parse {language} file: {filepath}",
            filepath=filepath,
            language=language,
            reason=reason,
            line=line,
        )
        self.filepath = filepath
        self.language = language
        self.reason = reason
        self.line = line
