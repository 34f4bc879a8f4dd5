"""Console output for test runs."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from uirunner.core.errors import PreconditionError
from uirunner.models.test import RunSummary, TestSpec

# Status icons
ICONS = {
    "running": "⏳",
    "passed": "✅",
    "failed": "❌",
    "retry": "🔁",
}


class ConsoleReporter:
    """Progress and summary output for a run.

    Usage:
        reporter = ConsoleReporter()
        reporter.attempt_started("login_flow", 1)
        reporter.attempt_finished("login_flow", 1, passed=True)
        reporter.summary(run_summary)
    """

    def __init__(self, console: Console | None = None):
        """Initialize reporter.

        Args:
            console: Optional Rich console (uses default if not provided)
        """
        self._console = console or Console()

    def attempt_started(self, test_name: str, attempt: int) -> None:
        self._console.print(
            f"{ICONS['running']} Running: {escape(test_name)} [dim](attempt {attempt})[/dim]"
        )

    def attempt_finished(
        self, test_name: str, attempt: int, passed: bool, error: str | None = None
    ) -> None:
        """Called when one engine invocation returns.

        Args:
            test_name: Test name
            attempt: Attempt number (1-indexed)
            passed: Whether the engine reported success
            error: Last line of engine output on failure
        """
        if passed:
            self._console.print(f"{ICONS['passed']} [green]{escape(test_name)} PASSED[/green]")
            return

        self._console.print(
            f"{ICONS['failed']} [red]{escape(test_name)} FAILED[/red] [dim](attempt {attempt})[/dim]"
        )
        if error:
            # Truncate long errors
            if len(error) > 100:
                error = error[:97] + "..."
            self._console.print(f"   [red]{escape(error)}[/red]", highlight=False)

    def retry_scheduled(self, test_name: str, retry: int, max_retries: int) -> None:
        self._console.print(
            f"{ICONS['retry']} [yellow]Retry {retry}/{max_retries} for {escape(test_name)}[/yellow]"
        )

    def screenshot_captured(self, path: Path) -> None:
        self._console.print(f"[dim]Screenshot saved: {escape(str(path))}[/dim]")

    def stopping_early(self) -> None:
        self._console.print("[red]Stopping due to test failure (use -c to continue)[/red]")

    def test_list(self, specs: list[TestSpec], test_dir: Path) -> None:
        """Print the --list view."""
        self._console.print("Available UI Test Files:")
        self._console.print("========================")

        if not test_dir.is_dir():
            self._console.print(f"  No {test_dir}/ directory found")
            return

        if not specs:
            self._console.print(f"  No test files found in {test_dir}/")
            self._console.print()
            self._console.print("Add Maestro flows (*.yaml, *.yml) to that directory")
            return

        for spec in specs:
            self._console.print(f"  - {escape(spec.file_name)} ({spec.line_count()} lines)")
        self._console.print()
        self._console.print(f"Total: {len(specs)} test file(s)")

    def precondition_failed(self, error: PreconditionError) -> None:
        for message, hint in error.problems:
            self._console.print(f"[red]✗[/red] {escape(message)}")
            if hint:
                self._console.print(f"  [dim]{escape(hint)}[/dim]")
        self._console.print(f"[red]Error:[/red] {error}")

    def summary(self, summary: RunSummary) -> None:
        """Print the final summary table and failed test list."""
        table = Table(title="UI Test Summary", show_header=False, min_width=40)
        table.add_column("Field", style="dim")
        table.add_column("Value")
        table.add_row("Platform", summary.platform.value)
        table.add_row("Timestamp", summary.timestamp)
        table.add_row("[green]Passed[/green]", str(summary.passed_count))
        table.add_row("[red]Failed[/red]", str(summary.failed_count))
        table.add_row("Total", str(summary.total_count))

        self._console.print()
        self._console.print(table)

        if summary.failed_test_names:
            self._console.print()
            self._console.print("Failed tests:")
            for name in summary.failed_test_names:
                self._console.print(f"  - {escape(name)}")

        if summary.results_dir:
            self._console.print()
            self._console.print(f"[dim]Results saved to: {escape(str(summary.results_dir))}/[/dim]")
