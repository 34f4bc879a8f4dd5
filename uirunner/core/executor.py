"""Single-test execution with bounded retry."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from uirunner.core.engine import EngineResult, MaestroEngine
from uirunner.core.screenshot_saver import ScreenshotSaver
from uirunner.core.targets import TargetBridge
from uirunner.models.test import TestOutcome, TestSpec, TestStatus

if TYPE_CHECKING:
    from uirunner.core.console_reporter import ConsoleReporter

logger = logging.getLogger("uirunner.executor")


class TestExecutor:
    """Run one TestSpec against the engine, retrying failed attempts.

    Attempts are numbered from 1. A failed attempt is retried after a flat
    delay while attempt <= max_retries, so a test gets at most
    max_retries + 1 attempts. Each attempt writes its own engine report; the
    outcome references the last one. A screenshot of the target is taken
    once, after the final failed attempt.
    """

    __test__ = False

    def __init__(
        self,
        engine: MaestroEngine,
        target: TargetBridge,
        results_dir: Path,
        timestamp: str,
        max_retries: int = 2,
        retry_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        reporter: ConsoleReporter | None = None,
        device: str | None = None,
        app_id: str | None = None,
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries must be non-negative: {max_retries}")

        self._engine = engine
        self._target = target
        self._results_dir = Path(results_dir)
        self._timestamp = timestamp
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._sleep = sleep
        self._clock = clock
        self._reporter = reporter
        self._device = device
        self._app_id = app_id
        self._screenshots = ScreenshotSaver(self._results_dir, timestamp)

    @property
    def max_attempts(self) -> int:
        return self._max_retries + 1

    def report_path(self, spec: TestSpec, attempt: int) -> Path:
        """Engine report path for one attempt.

        Keyed by test name, run timestamp and attempt so no attempt
        overwrites another.
        """
        return self._results_dir / f"{spec.name}_{self._timestamp}_attempt{attempt}.xml"

    def execute(self, spec: TestSpec) -> TestOutcome:
        """Run a test until it passes or attempts are exhausted.

        Args:
            spec: Test to run

        Returns:
            Final outcome for the test
        """
        start = self._clock()
        attempt = 1
        result: EngineResult | None = None

        while attempt <= self.max_attempts:
            if attempt > 1:
                logger.info("Retry %d/%d for %s", attempt - 1, self._max_retries, spec.name)
                if self._reporter:
                    self._reporter.retry_scheduled(spec.name, attempt - 1, self._max_retries)
                self._sleep(self._retry_delay)

            if self._reporter:
                self._reporter.attempt_started(spec.name, attempt)

            result = self._engine.run(
                spec,
                self.report_path(spec, attempt),
                device=self._device,
                app_id=self._app_id,
            )
            logger.debug("%s attempt %d: %s", spec.name, attempt, "passed" if result.success else "failed")

            if self._reporter:
                self._reporter.attempt_finished(spec.name, attempt, result.success, result.error)

            if result.success:
                return TestOutcome(
                    test_name=spec.name,
                    file_name=spec.file_name,
                    attempt_count=attempt,
                    status=TestStatus.PASSED,
                    report_path=result.report_path,
                    duration=self._clock() - start,
                )

            if attempt == self.max_attempts:
                break
            attempt += 1

        screenshot = self._target.capture_screenshot(self._screenshots.path_for(spec.name))
        if screenshot:
            logger.info("Screenshot saved: %s", screenshot)
            if self._reporter:
                self._reporter.screenshot_captured(screenshot)
        else:
            logger.debug("No screenshot captured for %s", spec.name)

        return TestOutcome(
            test_name=spec.name,
            file_name=spec.file_name,
            attempt_count=attempt,
            status=TestStatus.FAILED,
            report_path=result.report_path if result else None,
            screenshot_path=screenshot,
            duration=self._clock() - start,
        )
