"""Data models for uirunner."""

from uirunner.models.test import (
    FLOW_EXTENSIONS,
    Platform,
    RunSummary,
    TestOutcome,
    TestSpec,
    TestStatus,
)

__all__ = [
    "FLOW_EXTENSIONS",
    "Platform",
    "RunSummary",
    "TestOutcome",
    "TestSpec",
    "TestStatus",
]
