"""JSON formatter: the CI-consumable report."""

import json

from ..models import CheckReport
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render the report as JSON."""

    def render(self, report: CheckReport) -> None:
        print(self.format(report))

    def format(self, report: CheckReport) -> str:
        return json.dumps(report.to_dict(), indent=2)
