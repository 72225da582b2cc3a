"""Root of the fatal exception hierarchy."""

from typing import Any


class LayerguardError(Exception):
    """A fatal error: the run stops and ``layerguard check`` exits with 2.

    Details are passed as keywords and shown after the message as
    ``key=value`` pairs. Values are stored as strings; ``None`` values are
    dropped so callers can pass optional context unconditionally.
    """

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = {key: str(value) for key, value in details.items() if value is not None}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        pairs = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({pairs})"
