"""Test run data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# Recognized flow file extensions, in glob order
FLOW_EXTENSIONS = (".yaml", ".yml")


class Platform(str, Enum):
    """Target platform for a test run."""

    ANDROID = "android"
    IOS = "ios"
    CATALYST = "catalyst"


class TestStatus(str, Enum):
    """Final status of a single test."""

    # Tell pytest not to collect this as a test class
    __test__ = False

    PASSED = "passed"
    FAILED = "failed"


def spec_name(path: Path) -> str:
    """Strip a flow extension from a file name.

    Args:
        path: Flow file path

    Returns:
        Base name without .yaml/.yml (e.g., "login_flow")
    """
    name = path.name
    for ext in FLOW_EXTENSIONS:
        if name.endswith(ext):
            return name[: -len(ext)]
    return name


@dataclass(frozen=True)
class TestSpec:
    """One UI test scenario file."""

    __test__ = False

    name: str
    path: Path
    platform: Platform = Platform.ANDROID

    @classmethod
    def from_path(cls, path: Path, platform: Platform = Platform.ANDROID) -> TestSpec:
        return cls(name=spec_name(path), path=Path(path), platform=platform)

    @property
    def file_name(self) -> str:
        return self.path.name

    def line_count(self) -> int:
        """Count lines in the flow file (0 if unreadable)."""
        try:
            with open(self.path, "rb") as f:
                return sum(1 for _ in f)
        except OSError:
            return 0


@dataclass
class TestOutcome:
    """Result of running one TestSpec, possibly over several attempts."""

    __test__ = False

    test_name: str
    file_name: str
    attempt_count: int
    status: TestStatus
    report_path: Path | None = None
    screenshot_path: Path | None = None  # Only set on final failure
    duration: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status == TestStatus.PASSED

    def to_dict(self) -> dict[str, Any]:
        return {
            "test": self.test_name,
            "file": self.file_name,
            "status": self.status.value,
            "attempts": self.attempt_count,
            "report": str(self.report_path) if self.report_path else None,
            "screenshot": str(self.screenshot_path) if self.screenshot_path else None,
            "duration": round(self.duration, 3),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TestOutcome:
        report = data.get("report")
        screenshot = data.get("screenshot")
        return cls(
            test_name=data.get("test", "unknown"),
            file_name=data.get("file") or data.get("test", "unknown"),
            attempt_count=int(data.get("attempts", 1)),
            status=TestStatus(data.get("status", "failed")),
            report_path=Path(report) if report else None,
            screenshot_path=Path(screenshot) if screenshot else None,
            duration=float(data.get("duration", 0.0)),
        )


@dataclass(frozen=True)
class RunSummary:
    """Aggregate of all outcomes produced by one invocation."""

    platform: Platform
    timestamp: str
    outcomes: tuple[TestOutcome, ...] = field(default_factory=tuple)
    results_dir: Path | None = None

    @property
    def passed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.passed)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.passed)

    @property
    def total_count(self) -> int:
        return len(self.outcomes)

    @property
    def failed_test_names(self) -> list[str]:
        """File names of failed tests, in execution order."""
        return [o.file_name for o in self.outcomes if not o.passed]

    @property
    def success(self) -> bool:
        return self.failed_count == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "platform": self.platform.value,
            "timestamp": self.timestamp,
            "results_dir": str(self.results_dir) if self.results_dir else None,
            "summary": {
                "passed": self.passed_count,
                "failed": self.failed_count,
                "total": self.total_count,
            },
            "failed_tests": self.failed_test_names,
            "tests": [o.to_dict() for o in self.outcomes],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunSummary:
        results_dir = data.get("results_dir")
        return cls(
            platform=Platform(data.get("platform", Platform.ANDROID.value)),
            timestamp=data.get("timestamp", ""),
            outcomes=tuple(TestOutcome.from_dict(t) for t in data.get("tests", [])),
            results_dir=Path(results_dir) if results_dir else None,
        )
