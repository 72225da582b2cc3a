"""GitHub Actions formatter: workflow annotations plus a summary line."""

from typing import Any

from ..models import CheckReport
from .base import BaseFormatter


def _escape(value: str) -> str:
    # Workflow commands end at a newline; '%' starts an escape sequence
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape(value).replace(":", "%3A").replace(",", "%2C")


class GithubFormatter(BaseFormatter):
    """Output GitHub Actions ``::error`` / ``::warning`` annotations.

    Violations and evaluation errors are errors; every collected issue is a
    warning. An annotation points at a file when the issue knows one.
    """

    def render(self, report: CheckReport) -> None:
        print(self.format(report))

    def format(self, report: CheckReport) -> str:
        data = report.to_dict()
        lines: list[str] = []

        for contract in data["contracts"]:
            title = _escape_property(f"layerguard: {contract['name']}")
            for v in contract["violations"]:
                message = f"{' -> '.join(v['path'])}: {v['explanation']}"
                lines.append(f"::error title={title}::{_escape(message)}")
            if contract["error"] is not None:
                lines.append(f"::error title={title}::{_escape(contract['error']['message'])}")
            for w in contract["warnings"]:
                lines.append(self._warning(w))

        for w in data["warnings"]:
            lines.append(self._warning(w))

        summary = data["summary"]
        lines.append(
            f"layerguard {data['status'].upper()}: {summary['contracts']} contracts, "
            f"{summary['violations']} violations, {summary['warnings']} warnings "
            f"({summary['modules']} modules, {summary['edges']} edges)"
        )
        return "\n".join(lines)

    @staticmethod
    def _warning(issue: dict[str, Any]) -> str:
        props = [f"title={_escape_property(issue['code'])}"]
        file = issue["context"].get("file")
        if file:
            props.insert(0, f"file={_escape_property(file)}")
            line = issue["context"].get("line")
            if line:
                props.insert(1, f"line={line}")
        return f"::warning {','.join(props)}::{_escape(issue['message'])}"
