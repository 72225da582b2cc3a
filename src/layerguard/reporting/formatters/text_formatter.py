"""Rich terminal formatter for check reports."""

from io import StringIO

from rich.console import Console
from rich.markup import escape

from ...contracts.evaluator import ContractResult
from ...exceptions import GuardIssue
from ..models import CheckReport
from .base import BaseFormatter

_STATUS_LABELS = {
    "pass": "[green bold]PASS[/green bold]",
    "fail": "[red bold]FAIL[/red bold]",
    "error": "[magenta bold]ERROR[/magenta bold]",
}


class TextFormatter(BaseFormatter):
    """Per-contract PASS/FAIL, one witness path per line, warnings, summary."""

    def render(self, report: CheckReport) -> None:
        self._print(Console(soft_wrap=True), report)

    def format(self, report: CheckReport) -> str:
        buffer = StringIO()
        self._print(Console(file=buffer, color_system=None, soft_wrap=True), report)
        return buffer.getvalue()

    # -- private helpers --

    def _print(self, console: Console, report: CheckReport) -> None:
        for result in report.results:
            self._print_contract(console, result)

        if report.scan_warnings:
            console.print(f"[bold yellow]Scan warnings ({len(report.scan_warnings)})[/bold yellow]")
            for issue in report.scan_warnings:
                self._print_issue(console, issue, indent="  ")
            console.print()

        self._print_summary(console, report)

    def _print_contract(self, console: Console, result: ContractResult) -> None:
        contract = result.contract
        console.print(
            f"{_STATUS_LABELS[result.status]}  [bold]{escape(contract.name)}[/bold] "
            f"[dim]({contract.type.value}: {escape(contract.describe())})[/dim]"
        )

        if result.error is not None:
            console.print(f"  [magenta]{escape(result.error.message)}[/magenta]")

        for violation in result.violations:
            console.print(f"  [red]x[/red] {escape(str(violation))}")
            if not violation.is_direct or violation.source_layer is not None:
                console.print(f"    [dim]{escape(violation.explanation)}[/dim]")

        for issue in result.warnings:
            self._print_issue(console, issue, indent="  ")
        console.print()

    @staticmethod
    def _print_issue(console: Console, issue: GuardIssue, indent: str) -> None:
        console.print(
            f"{indent}[yellow]![/yellow] [dim]{issue.code.value}[/dim] {escape(issue.message)}"
        )

    @staticmethod
    def _print_summary(console: Console, report: CheckReport) -> None:
        passed = sum(1 for r in report.results if r.status == "pass")
        status = (
            "[green bold]PASS[/green bold]" if report.passed else "[red bold]FAIL[/red bold]"
        )
        console.print(
            f"{status}  {passed}/{len(report.results)} contracts kept, "
            f"[red]{report.violation_count}[/red] violations, "
            f"[yellow]{report.warning_count}[/yellow] warnings  "
            f"[dim]({report.module_count} modules, {report.edge_count} edges, "
            f"{report.duration_seconds:.2f}s)[/dim]"
        )
