"""Configuration exceptions: contract definitions and settings."""

from pathlib import Path
from typing import Any, Optional

from .base import LayerguardError


class ContractConfigError(LayerguardError):
    """Raised when contract definitions are malformed."""

    def __init__(self, reason: str, contract: Optional[str] = None, source: Optional[Path] = None):
        message = f"Invalid contract '{contract}'" if contract else "Invalid contract configuration"
        super().__init__(message, reason=reason, contract=contract or None, source=source)
        self.reason = reason
        self.contract = contract
        self.source = source


class InvalidConfigError(ContractConfigError):
    """Raised when a settings value is invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(reason)
        self.message = f"Invalid configuration for {key}: {value}"
        self.details = {"key": key, "value": str(value), "reason": reason}
        self.key = key
        self.value = value
