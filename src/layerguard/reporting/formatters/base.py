"""Base formatter interface for check report rendering."""

from abc import ABC, abstractmethod

from ..models import CheckReport


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, report: CheckReport) -> None:
        """Print the report to stdout."""

    @abstractmethod
    def format(self, report: CheckReport) -> str:
        """Return the report as a string (for --output files and tests)."""
