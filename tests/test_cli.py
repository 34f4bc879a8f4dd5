"""Tests for CLI commands."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from uirunner import __version__
from uirunner.cli import app

runner = CliRunner(env={"COLUMNS": "200"})


@pytest.fixture
def patched(config, make_engine, make_target):
    """Run the CLI against fake engine/target with the temp config."""
    config.retry.delay = 0.0
    engine = make_engine()
    target = make_target()
    with (
        patch("uirunner.core.config.ConfigLoader.load", return_value=config),
        patch("uirunner.core.orchestrator.MaestroEngine", return_value=engine),
        patch("uirunner.core.orchestrator.create_target", return_value=target),
    ):
        yield engine, target


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestRunCommand:
    """Tests for `uirunner run`."""

    def test_all_pass_exit_zero(self, flows, patched, config):
        engine, _ = patched

        result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        assert engine.names_run() == ["a_launch", "b_login", "c_logout"]
        assert list(config.results_dir.glob("report_*.html"))

    def test_failure_stops_and_exits_one(self, flows, patched):
        engine, target = patched
        engine.script = {"a_launch": [False]}

        result = runner.invoke(app, ["run", "android"])

        assert result.exit_code == 1
        assert set(engine.names_run()) == {"a_launch"}
        assert len(engine.calls) == 3
        assert "Stopping due to test failure" in result.output
        assert len(target.screenshots) == 1

    def test_continue_and_retries(self, flows, patched):
        engine, _ = patched
        engine.script = {"a_launch": [False]}

        result = runner.invoke(app, ["run", "--continue", "--retries", "0"])

        assert result.exit_code == 1
        assert engine.names_run() == ["a_launch", "b_login", "c_logout"]
        assert "a_launch.yaml" in result.output

    def test_single_test(self, flows, patched):
        engine, _ = patched

        result = runner.invoke(app, ["run", "-t", "b_login.yaml"])

        assert result.exit_code == 0
        assert engine.names_run() == ["b_login"]

    def test_missing_test_file(self, flows, patched):
        engine, _ = patched

        result = runner.invoke(app, ["run", "--test", "missing.yaml"])

        assert result.exit_code == 1
        assert "Test file not found" in result.output
        assert engine.calls == []

    def test_no_tests_exits_zero(self, patched, config):
        result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        assert "No UI test files found" in result.output
        assert not config.results_dir.exists() or not list(config.results_dir.glob("report_*"))

    def test_no_report(self, flows, patched, config):
        result = runner.invoke(app, ["run", "--no-report"])

        assert result.exit_code == 0
        assert not list(config.results_dir.glob("report_*.html"))

    def test_precondition_failure(self, flows, patched):
        engine, target = patched
        engine.available = False

        result = runner.invoke(app, ["run"])

        assert result.exit_code == 1
        assert "Maestro not installed" in result.output
        assert engine.calls == []

    def test_list(self, flows, patched):
        engine, _ = patched

        result = runner.invoke(app, ["run", "--list"])

        assert result.exit_code == 0
        assert "a_launch.yaml (3 lines)" in result.output
        assert "Total: 3 test file(s)" in result.output
        assert engine.calls == []

    def test_list_without_dir(self, patched):
        result = runner.invoke(app, ["run", "--list"])

        assert result.exit_code == 0
        assert "directory found" in " ".join(result.output.split())

    def test_invalid_platform(self, patched):
        result = runner.invoke(app, ["run", "windows"])

        assert result.exit_code == 2

    def test_negative_retries_rejected(self, patched):
        result = runner.invoke(app, ["run", "--retries", "-1"])

        assert result.exit_code == 2


class TestTargetsCommand:
    def test_lists_targets(self, config, make_target):
        with (
            patch("uirunner.core.config.ConfigLoader.load", return_value=config),
            patch("uirunner.core.targets.create_target", return_value=make_target()),
        ):
            result = runner.invoke(app, ["targets"])

        assert result.exit_code == 0
        assert "emulator-5554" in result.output

    def test_no_targets(self, config, make_target):
        target = make_target(problems=[("No Android device/emulator connected", "Start one")])
        with (
            patch("uirunner.core.config.ConfigLoader.load", return_value=config),
            patch("uirunner.core.targets.create_target", return_value=target),
        ):
            result = runner.invoke(app, ["targets"])

        assert result.exit_code == 1
        assert "No android targets found" in result.output


class TestReportCommand:
    def test_regenerates_html(self, tmp_path):
        summary = {
            "platform": "ios",
            "timestamp": "20251201_143025",
            "results_dir": str(tmp_path),
            "tests": [
                {"test": "login", "file": "login.yaml", "status": "failed", "attempts": 3},
            ],
        }
        json_path = tmp_path / "summary_20251201_143025.json"
        json_path.write_text(json.dumps(summary))

        result = runner.invoke(app, ["report", str(json_path)])

        assert result.exit_code == 0
        html_path = tmp_path / "report_20251201_143025.html"
        assert html_path.exists()
        assert "<li>login.yaml</li>" in html_path.read_text()

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["report", str(tmp_path / "nope.json")])

        assert result.exit_code == 1

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("nope")

        result = runner.invoke(app, ["report", str(path)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_malformed_tests_entry(self, tmp_path):
        path = tmp_path / "summary.json"
        path.write_text(json.dumps({"platform": "android", "tests": ["x"]}))

        result = runner.invoke(app, ["report", str(path)])

        assert result.exit_code == 1
        assert "Not a run summary" in " ".join(result.output.split())
