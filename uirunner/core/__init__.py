"""Core modules for uirunner."""

from uirunner.core.config import ConfigLoader, RetryConfig, RunnerConfig, ToolPaths
from uirunner.core.console_reporter import ConsoleReporter
from uirunner.core.discovery import TestDiscovery
from uirunner.core.engine import EngineResult, MaestroEngine
from uirunner.core.errors import (
    NoTestsFoundError,
    PreconditionError,
    RunnerError,
    TestNotFoundError,
)
from uirunner.core.executor import TestExecutor
from uirunner.core.orchestrator import RunOptions, RunOrchestrator, RunResult
from uirunner.core.report import ReportGenerator, render_html, render_junit
from uirunner.core.targets import (
    AndroidTarget,
    CatalystTarget,
    IosSimulatorTarget,
    TargetBridge,
    create_target,
)

__all__ = [
    "AndroidTarget",
    "CatalystTarget",
    "ConfigLoader",
    "ConsoleReporter",
    "EngineResult",
    "IosSimulatorTarget",
    "MaestroEngine",
    "NoTestsFoundError",
    "PreconditionError",
    "ReportGenerator",
    "RetryConfig",
    "RunOptions",
    "RunOrchestrator",
    "RunResult",
    "RunnerConfig",
    "RunnerError",
    "TargetBridge",
    "TestDiscovery",
    "TestExecutor",
    "TestNotFoundError",
    "ToolPaths",
    "create_target",
    "render_html",
    "render_junit",
]
