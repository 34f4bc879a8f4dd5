"""Maestro test engine invocation."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

from uirunner.core.config import RunnerConfig
from uirunner.models.test import TestSpec

logger = logging.getLogger("uirunner.engine")


@dataclass
class EngineResult:
    """Result of a single engine invocation."""

    success: bool
    report_path: Path
    returncode: int | None = None
    output: str = ""
    error: str | None = None
    duration: float = 0.0


class MaestroEngine:
    """Run flow files through the maestro CLI."""

    def __init__(self, config: RunnerConfig):
        """Initialize engine.

        Args:
            config: Runner configuration (binary location, timeout)
        """
        self._config = config

    def resolve_binary(self) -> str | None:
        """Locate the maestro binary.

        Checks the configured name/path, then PATH, then the installer's
        default location (~/.maestro/bin/maestro).

        Returns:
            Path to the binary, or None if not installed
        """
        configured = self._config.tools.maestro
        found = shutil.which(configured)
        if found:
            return found

        fallback = self._config.tools.maestro_home / "maestro"
        if fallback.is_file():
            return str(fallback)

        return None

    def is_available(self) -> bool:
        return self.resolve_binary() is not None

    def build_command(
        self,
        binary: str,
        spec: TestSpec,
        report_path: Path,
        device: str | None = None,
        app_id: str | None = None,
    ) -> list[str]:
        """Build the maestro command line for one flow."""
        cmd = [binary]
        if device:
            cmd.extend(["--device", device])
        cmd.extend([
            "test", str(spec.path),
            "--format", "junit",
            "--output", str(report_path),
        ])
        if app_id:
            cmd.extend(["-e", f"APP_ID={app_id}"])
        return cmd

    def run(
        self,
        spec: TestSpec,
        report_path: Path,
        device: str | None = None,
        app_id: str | None = None,
    ) -> EngineResult:
        """Run one flow synchronously.

        Args:
            spec: Flow to run
            report_path: Where maestro writes its JUnit report
            device: Optional device/simulator id passed to maestro
            app_id: Optional app id exposed to the flow as ${APP_ID}

        Returns:
            EngineResult; success iff maestro exited with code 0
        """
        binary = self.resolve_binary()
        if binary is None:
            return EngineResult(
                success=False,
                report_path=report_path,
                error="maestro not installed",
            )

        cmd = self.build_command(binary, spec, report_path, device=device, app_id=app_id)
        logger.debug("Running: %s", " ".join(cmd))

        start = time.monotonic()
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                timeout=self._config.engine_timeout,
            )
        except subprocess.TimeoutExpired:
            duration = time.monotonic() - start
            logger.warning("maestro timed out after %.0fs on %s", duration, spec.name)
            return EngineResult(
                success=False,
                report_path=report_path,
                error=f"timed out after {self._config.engine_timeout:.0f}s",
                duration=duration,
            )
        except OSError as e:
            logger.warning("Could not start maestro: %s", e)
            return EngineResult(success=False, report_path=report_path, error=str(e))

        duration = time.monotonic() - start
        output = (result.stdout or "") + (result.stderr or "")
        logger.debug("maestro exited %d for %s (%.1fs)", result.returncode, spec.name, duration)

        return EngineResult(
            success=result.returncode == 0,
            report_path=report_path,
            returncode=result.returncode,
            output=output,
            error=None if result.returncode == 0 else _last_line(output),
            duration=duration,
        )


def _last_line(output: str) -> str | None:
    lines = [line.strip() for line in output.strip().splitlines() if line.strip()]
    return lines[-1] if lines else None
