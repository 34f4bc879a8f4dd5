"""Exceptions raised by the test runner."""

from __future__ import annotations


class RunnerError(Exception):
    """Base error for uirunner."""


class PreconditionError(RunnerError):
    """Engine or target not ready; nothing was run."""

    def __init__(self, problems: list[tuple[str, str | None]]):
        """Initialize with collected problems.

        Args:
            problems: List of (message, remediation hint or None)
        """
        self.problems = problems
        count = len(problems)
        super().__init__(f"Prerequisites check failed with {count} error(s)")


class NoTestsFoundError(RunnerError):
    """Test directory is missing or holds no flow files."""

    def __init__(self, test_dir):
        self.test_dir = test_dir
        super().__init__(f"No UI test files found in {test_dir}/")


class TestNotFoundError(RunnerError):
    """A requested test file does not exist."""

    __test__ = False

    def __init__(self, test_filter):
        self.test_filter = test_filter
        super().__init__(f"Test file not found: {test_filter}")
