"""Shared fixtures for uirunner tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from uirunner.core.config import RunnerConfig, ToolPaths
from uirunner.core.engine import EngineResult
from uirunner.models.test import TestSpec


class FakeEngine:
    """Engine double returning scripted results per test name.

    script maps test name -> list of booleans, one per attempt. Missing
    names pass on the first attempt.
    """

    def __init__(self, script: dict[str, list[bool]] | None = None, available: bool = True):
        self.script = script or {}
        self.available = available
        self.calls: list[tuple[str, Path]] = []

    def is_available(self) -> bool:
        return self.available

    def resolve_binary(self) -> str | None:
        return "/usr/local/bin/maestro" if self.available else None

    def run(self, spec: TestSpec, report_path: Path, device=None, app_id=None) -> EngineResult:
        attempt = sum(1 for name, _ in self.calls if name == spec.name)
        self.calls.append((spec.name, report_path))
        results = self.script.get(spec.name, [True])
        success = results[attempt] if attempt < len(results) else results[-1]
        return EngineResult(
            success=success,
            report_path=report_path,
            returncode=0 if success else 1,
            error=None if success else "Assertion is false",
        )

    def names_run(self) -> list[str]:
        return [name for name, _ in self.calls]


class FakeTarget:
    """Target double that records screenshot requests."""

    def __init__(self, problems=None, write_screenshot: bool = True):
        self.problems = problems or []
        self.write_screenshot = write_screenshot
        self.screenshots: list[Path] = []

    def check(self):
        return list(self.problems)

    def available_targets(self):
        return [] if self.problems else [{"id": "emulator-5554", "name": "Pixel 7", "status": "device"}]

    def capture_screenshot(self, path: Path) -> Path | None:
        self.screenshots.append(path)
        if not self.write_screenshot:
            return None
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x89PNG fake")
        return path


@pytest.fixture
def config(tmp_path: Path) -> RunnerConfig:
    """Config pointing at temporary test/results directories."""
    return RunnerConfig(
        test_dir=tmp_path / "ui-tests",
        results_dir=tmp_path / "ui-test-results",
        tools=ToolPaths(maestro_home=tmp_path / "maestro-home"),
    )


@pytest.fixture
def flows(config: RunnerConfig) -> list[Path]:
    """Three flow files in the test directory."""
    config.test_dir.mkdir(parents=True)
    paths = []
    for name in ("a_launch.yaml", "b_login.yaml", "c_logout.yml"):
        path = config.test_dir / name
        path.write_text("appId: com.example.app\n---\n- launchApp\n")
        paths.append(path)
    return paths


@pytest.fixture
def make_engine():
    """Factory for FakeEngine."""
    return FakeEngine


@pytest.fixture
def make_target():
    """Factory for FakeTarget."""
    return FakeTarget
