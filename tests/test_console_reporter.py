"""Tests for ConsoleReporter output."""

import io

from rich.console import Console

from uirunner.core.console_reporter import ConsoleReporter
from uirunner.core.errors import PreconditionError
from uirunner.models.test import Platform, RunSummary, TestOutcome, TestSpec, TestStatus


def _reporter():
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, force_terminal=False, color_system=None)
    return ConsoleReporter(console=console), buffer


class TestConsoleReporter:
    def test_attempt_lines(self):
        reporter, buffer = _reporter()

        reporter.attempt_started("login", 1)
        reporter.attempt_finished("login", 1, passed=False, error="Element [Login] not found")
        reporter.retry_scheduled("login", 1, 2)
        reporter.attempt_finished("login", 2, passed=True)

        output = buffer.getvalue()
        assert "Running: login (attempt 1)" in output
        assert "login FAILED (attempt 1)" in output
        assert "Element [Login] not found" in output
        assert "Retry 1/2 for login" in output
        assert "login PASSED" in output

    def test_long_error_truncated(self):
        reporter, buffer = _reporter()

        reporter.attempt_finished("t", 1, passed=False, error="x" * 300)

        assert "x" * 97 + "..." in buffer.getvalue()

    def test_bracketed_names_printed_literally(self, tmp_path):
        reporter, buffer = _reporter()
        flow = tmp_path / "login[v2].yaml"
        flow.write_text("appId: x\n")

        reporter.attempt_started("login[v2]", 1)
        reporter.attempt_finished("login[v2]", 1, passed=True)
        reporter.test_list([TestSpec.from_path(flow)], tmp_path)

        output = buffer.getvalue()
        assert "Running: login[v2] (attempt 1)" in output
        assert "login[v2] PASSED" in output
        assert "  - login[v2].yaml (1 lines)" in output

    def test_summary_lists_failures(self, tmp_path):
        reporter, buffer = _reporter()
        summary = RunSummary(
            platform=Platform.ANDROID,
            timestamp="20251201_143025",
            outcomes=(
                TestOutcome("a", "a.yaml", 1, TestStatus.PASSED),
                TestOutcome("b", "b.yaml", 3, TestStatus.FAILED),
            ),
            results_dir=tmp_path,
        )

        reporter.summary(summary)

        output = buffer.getvalue()
        assert "UI Test Summary" in output
        assert "20251201_143025" in output
        assert "  - b.yaml" in output
        assert "Results saved to" in output

    def test_precondition_hints(self):
        reporter, buffer = _reporter()

        reporter.precondition_failed(
            PreconditionError([("No iOS simulator running", "Start a simulator: open -a Simulator")])
        )

        output = buffer.getvalue()
        assert "No iOS simulator running" in output
        assert "open -a Simulator" in output
        assert "1 error(s)" in output
