"""Run orchestration: preconditions, discovery, execution, reporting."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from uirunner.core.config import RunnerConfig
from uirunner.core.console_reporter import ConsoleReporter
from uirunner.core.discovery import TestDiscovery
from uirunner.core.engine import MaestroEngine
from uirunner.core.errors import PreconditionError
from uirunner.core.executor import TestExecutor
from uirunner.core.report import ReportGenerator
from uirunner.core.targets import Problem, TargetBridge, create_target
from uirunner.models.test import Platform, RunSummary, TestOutcome, TestSpec

logger = logging.getLogger("uirunner.orchestrator")

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


@dataclass
class RunOptions:
    """Per-invocation options."""

    platform: Platform = Platform.ANDROID
    test_filter: str | None = None
    continue_on_failure: bool = False
    max_retries: int = 2
    generate_report: bool = True
    app_id: str | None = None
    device: str | None = None


@dataclass
class RunResult:
    """Summary plus the report files written for it."""

    summary: RunSummary
    reports: dict[str, Path] = field(default_factory=dict)
    discovered: int = 0

    @property
    def exit_code(self) -> int:
        return exit_code(self.summary)


def exit_code(summary: RunSummary) -> int:
    """Process exit status for a finished run: 1 iff any test failed."""
    return 1 if summary.failed_count > 0 else 0


class RunOrchestrator:
    """Drive one invocation from precondition checks to reports.

    Usage:
        orchestrator = RunOrchestrator(config, RunOptions(platform=Platform.IOS))
        result = orchestrator.run()
        raise SystemExit(result.exit_code)
    """

    def __init__(
        self,
        config: RunnerConfig,
        options: RunOptions,
        engine: MaestroEngine | None = None,
        target: TargetBridge | None = None,
        reporter: ConsoleReporter | None = None,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = datetime.now,
    ):
        self._config = config
        self._options = options
        self._engine = engine or MaestroEngine(config)
        self._target = target or create_target(
            options.platform, config, device=options.device, app_id=options.app_id
        )
        self._reporter = reporter
        self._sleep = sleep
        self._timestamp = now().strftime(TIMESTAMP_FORMAT)
        self._discovery = TestDiscovery(config.test_dir, options.platform)

    def check_preconditions(self) -> None:
        """Verify the engine and a target are available.

        Raises:
            PreconditionError: One or more problems; no test has run
        """
        problems: list[Problem] = []

        if not self._engine.is_available():
            problems.append((
                "Maestro not installed",
                "Install it: curl -Ls https://get.maestro.mobile.dev | bash",
            ))
        else:
            logger.debug("Maestro available: %s", self._engine.resolve_binary())

        problems.extend(self._target.check())

        if problems:
            for message, _ in problems:
                logger.error("Precondition failed: %s", message)
            raise PreconditionError(problems)

    def discover(self) -> list[TestSpec]:
        """Discover specs for this run.

        Raises:
            NoTestsFoundError: Nothing to run (not a failure)
            TestNotFoundError: --test names a missing file
        """
        if not self._options.test_filter and not self._config.test_dir.exists():
            logger.warning("Test directory not found: %s", self._config.test_dir)
            self._config.test_dir.mkdir(parents=True, exist_ok=True)
        return self._discovery.discover(self._options.test_filter)

    def run(self) -> RunResult:
        """Run the whole flow.

        Returns:
            RunResult with summary and written report paths

        Raises:
            PreconditionError, NoTestsFoundError, TestNotFoundError
        """
        self.check_preconditions()
        specs = self.discover()

        results_dir = self._config.results_dir
        results_dir.mkdir(parents=True, exist_ok=True)

        logger.info("Found %d test file(s)", len(specs))
        summary = self.execute(specs)

        reports: dict[str, Path] = {}
        if self._options.generate_report:
            reports = ReportGenerator(results_dir).generate_all(summary)
            logger.info("Reports written: %s", ", ".join(str(p) for p in reports.values()))

        return RunResult(summary=summary, reports=reports, discovered=len(specs))

    def execute(self, specs: list[TestSpec]) -> RunSummary:
        """Execute specs in order and aggregate outcomes.

        Stops after the first failed test unless continue_on_failure is set;
        specs after that point get no outcome.
        """
        executor = TestExecutor(
            engine=self._engine,
            target=self._target,
            results_dir=self._config.results_dir,
            timestamp=self._timestamp,
            max_retries=self._options.max_retries,
            retry_delay=self._config.retry.delay,
            sleep=self._sleep,
            reporter=self._reporter,
            device=self._options.device,
            app_id=self._options.app_id,
        )

        outcomes: list[TestOutcome] = []
        for spec in specs:
            outcome = executor.execute(spec)
            outcomes.append(outcome)

            if not outcome.passed and not self._options.continue_on_failure:
                skipped = len(specs) - len(outcomes)
                logger.info("Stopping after %s failed; %d test(s) not run", spec.name, skipped)
                if self._reporter:
                    self._reporter.stopping_early()
                break

        return RunSummary(
            platform=self._options.platform,
            timestamp=self._timestamp,
            outcomes=tuple(outcomes),
            results_dir=self._config.results_dir,
        )
