"""Check reports and their renderers."""

from .formatters import get_formatter
from .models import CheckReport, Status

__all__ = ["CheckReport", "Status", "get_formatter"]
