"""Target bridges: availability checks and screenshots per platform."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from uirunner.core.config import RunnerConfig
from uirunner.models.test import Platform

logger = logging.getLogger("uirunner.targets")

# (message, remediation hint)
Problem = tuple[str, str | None]


class TargetBridge(ABC):
    """Queries against the device, simulator or desktop app under test."""

    platform: Platform

    def __init__(self, config: RunnerConfig):
        self._config = config

    @abstractmethod
    def check(self) -> list[Problem]:
        """Check that a target is ready.

        Returns:
            Problems found; empty list when the target is usable
        """

    @abstractmethod
    def available_targets(self) -> list[dict[str, str]]:
        """List usable targets as dicts with id, name, status."""

    @abstractmethod
    def _capture(self, path: Path) -> None:
        """Write a PNG of the target to path. May raise."""

    def capture_screenshot(self, path: Path) -> Path | None:
        """Capture a screenshot of the target, best effort.

        Args:
            path: Destination PNG path

        Returns:
            Path if a non-empty screenshot was written, None otherwise
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._capture(path)
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("Screenshot capture failed: %s", e)
            return None

        if path.is_file() and path.stat().st_size > 0:
            return path
        return None

    def _tool_present(self, name: str) -> bool:
        return shutil.which(name) is not None

    def _run(self, args: list[str], timeout: float = 30.0) -> subprocess.CompletedProcess:
        return subprocess.run(args, capture_output=True, text=True, timeout=timeout)


class AndroidTarget(TargetBridge):
    """Android device or emulator via adb."""

    platform = Platform.ANDROID

    def __init__(self, config: RunnerConfig, device: str | None = None):
        super().__init__(config)
        self._device = device

    def check(self) -> list[Problem]:
        if not self._tool_present(self._config.tools.adb):
            return [("ADB not found", "Install Android platform-tools and add adb to PATH")]

        if not self.available_targets():
            return [(
                "No Android device/emulator connected",
                "Connect a device or start an emulator",
            )]
        return []

    def available_targets(self) -> list[dict[str, str]]:
        """List Android devices in the 'device' state.

        Returns:
            List of device dicts with id, name, status
        """
        try:
            result = self._run([self._config.tools.adb, "devices", "-l"])
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("adb devices failed: %s", e)
            return []

        devices = parse_adb_devices(result.stdout)
        if self._device:
            devices = [d for d in devices if d["id"] == self._device]
        return devices

    def _capture(self, path: Path) -> None:
        cmd = [self._config.tools.adb]
        if self._device:
            cmd.extend(["-s", self._device])
        cmd.extend(["exec-out", "screencap", "-p"])

        # Capture screenshot directly to stdout as PNG
        result = subprocess.run(cmd, capture_output=True, check=True, timeout=30)
        if result.stdout:
            path.write_bytes(result.stdout)


def parse_adb_devices(output: str) -> list[dict[str, str]]:
    """Parse `adb devices -l` output.

    Only entries in the 'device' state are returned; offline and
    unauthorized devices cannot run tests.
    """
    devices = []
    for line in output.strip().split("\n")[1:]:  # Skip header
        if not line.strip() or line.startswith("*"):
            continue

        parts = line.split()
        if len(parts) < 2 or parts[1] != "device":
            continue

        name = "unknown"
        model_match = re.search(r"model:(\S+)", line)
        if model_match:
            name = model_match.group(1).replace("_", " ")

        devices.append({"id": parts[0], "name": name, "status": parts[1]})

    return devices


class IosSimulatorTarget(TargetBridge):
    """Booted iOS simulator via xcrun simctl."""

    platform = Platform.IOS

    _BOOTED_RE = re.compile(r"^\s*(?P<name>.+?) \((?P<udid>[0-9A-Fa-f-]{36})\) \((?P<status>Booted)\)")

    def check(self) -> list[Problem]:
        if not self._config.is_macos:
            return [("iOS testing requires macOS", None)]
        if not self._tool_present(self._config.tools.xcrun):
            return [("Xcode tools not found", "Install Xcode command line tools")]
        if not self.available_targets():
            return [("No iOS simulator running", "Start a simulator: open -a Simulator")]
        return []

    def available_targets(self) -> list[dict[str, str]]:
        try:
            result = self._run([self._config.tools.xcrun, "simctl", "list", "devices", "booted"])
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("simctl list failed: %s", e)
            return []

        targets = []
        for line in result.stdout.splitlines():
            match = self._BOOTED_RE.match(line)
            if match:
                targets.append({
                    "id": match.group("udid"),
                    "name": match.group("name"),
                    "status": match.group("status"),
                })
        return targets

    def _capture(self, path: Path) -> None:
        subprocess.run(
            [self._config.tools.xcrun, "simctl", "io", "booted", "screenshot", str(path)],
            capture_output=True,
            check=True,
            timeout=30,
        )


class CatalystTarget(TargetBridge):
    """iOS app running natively on macOS through Mac Catalyst."""

    platform = Platform.CATALYST

    # Catalina
    MIN_MACOS = (10, 15)

    # Xcode builds Catalyst apps into a *-maccatalyst products directory
    DEFAULT_PROCESS_PATTERN = "maccatalyst"

    def __init__(self, config: RunnerConfig, app_id: str | None = None):
        super().__init__(config)
        self._app_id = app_id

    @property
    def process_pattern(self) -> str:
        """pgrep -f pattern identifying the running app."""
        return self._app_id or self.DEFAULT_PROCESS_PATTERN

    def check(self) -> list[Problem]:
        if not self._config.is_macos:
            return [("Mac Catalyst requires macOS", None)]

        version = self.macos_version()
        if version is None or version < self.MIN_MACOS:
            found = ".".join(str(p) for p in version) if version else "unknown"
            return [(f"Mac Catalyst requires macOS 10.15+ (found {found})", None)]

        if not self.app_running():
            return [("Catalyst app not running", "Build and launch the Catalyst app first")]
        return []

    def app_running(self) -> bool:
        """Whether a process matching process_pattern is alive."""
        try:
            result = self._run([self._config.tools.pgrep, "-f", self.process_pattern])
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("pgrep failed: %s", e)
            return False
        return result.returncode == 0

    def macos_version(self) -> tuple[int, ...] | None:
        try:
            result = self._run([self._config.tools.sw_vers, "-productVersion"])
        except (OSError, subprocess.SubprocessError):
            return None
        return parse_version(result.stdout)

    def available_targets(self) -> list[dict[str, str]]:
        version = self.macos_version()
        if version is None or not self.app_running():
            return []
        return [{
            "id": self._app_id or "catalyst",
            "name": f"macOS {'.'.join(str(p) for p in version)}",
            "status": "running",
        }]

    def _capture(self, path: Path) -> None:
        subprocess.run(
            [self._config.tools.screencapture, "-x", str(path)],
            capture_output=True,
            check=True,
            timeout=30,
        )


def parse_version(text: str) -> tuple[int, ...] | None:
    """Parse '14.2.1' into (14, 2, 1)."""
    parts = re.findall(r"\d+", text.strip().split("\n")[0]) if text else []
    if not parts:
        return None
    return tuple(int(p) for p in parts)


def create_target(
    platform: Platform,
    config: RunnerConfig,
    device: str | None = None,
    app_id: str | None = None,
) -> TargetBridge:
    """Build the bridge for a platform."""
    if platform == Platform.ANDROID:
        return AndroidTarget(config, device=device)
    if platform == Platform.IOS:
        return IosSimulatorTarget(config)
    if platform == Platform.CATALYST:
        return CatalystTarget(config, app_id=app_id)
    raise ValueError(f"Unknown platform: {platform}")
