"""Configuration loader with layered priority.

Priority order (highest to lowest):
1. Command line flags (applied by the CLI on top of the loaded config)
2. Environment variables (UIRUNNER_TEST_DIR, UIRUNNER_DEVICE, UIRUNNER_RETRIES, ...)
3. Project config (.uirunner.yaml in current directory)
4. Global config (~/.uirunner.yaml)
5. Default values

Only ConfigLoader looks at the process environment. Everything else receives
a RunnerConfig.
"""

from __future__ import annotations

import logging
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Config file paths
GLOBAL_CONFIG = Path.home() / ".uirunner.yaml"
PROJECT_CONFIG = Path.cwd() / ".uirunner.yaml"

DEFAULT_TEST_DIR = Path("ui-tests")
DEFAULT_RESULTS_DIR = Path("ui-test-results")


def _safe_int(value: Any, default: int) -> int:
    """Convert value to int, returning default if None or invalid."""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _parse_bool(value: Any, default: bool = False) -> bool:
    """Parse boolean value from various formats.

    Handles:
    - None -> default
    - bool -> as-is
    - str -> "true", "1", "yes", "on" are True
    - other -> bool(value)
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on")
    return bool(value)


def _parse_duration(value: Any, default: float) -> float:
    """Parse duration value from string (e.g., '2s', '500ms') or number.

    Args:
        value: Duration as string ('2s', '500ms', '1.5s') or number (seconds)
        default: Default value if parsing fails

    Returns:
        Duration in seconds as float
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        value = value.strip().lower()
        if value.endswith("ms"):
            try:
                return float(value[:-2]) / 1000
            except ValueError:
                return default
        if value.endswith("s"):
            try:
                return float(value[:-1])
            except ValueError:
                return default
        try:
            return float(value)
        except ValueError:
            return default
    return default


@dataclass
class RetryConfig:
    """Retry settings for failed tests."""

    count: int = 2
    delay: float = 2.0  # Flat backoff between attempts, in seconds


@dataclass
class ToolPaths:
    """External binaries used by the engine and target bridges."""

    maestro: str = "maestro"
    maestro_home: Path = field(default_factory=lambda: Path.home() / ".maestro" / "bin")
    adb: str = "adb"
    xcrun: str = "xcrun"
    screencapture: str = "screencapture"
    sw_vers: str = "sw_vers"
    pgrep: str = "pgrep"


@dataclass
class RunnerConfig:
    """Main configuration for the runner."""

    test_dir: Path = DEFAULT_TEST_DIR
    results_dir: Path = DEFAULT_RESULTS_DIR
    app_id: str | None = None
    device: str | None = None
    verbose: bool = False
    engine_timeout: float = 600.0
    host_os: str = "linux"  # "macos" or "linux", as reported by platform.system()

    retry: RetryConfig = field(default_factory=RetryConfig)
    tools: ToolPaths = field(default_factory=ToolPaths)

    @property
    def is_macos(self) -> bool:
        return self.host_os == "macos"


def detect_host_os() -> str:
    """Return "macos" on Darwin, "linux" otherwise."""
    return "macos" if platform.system() == "Darwin" else "linux"


class ConfigLoader:
    """Loads and merges configuration from multiple sources."""

    @classmethod
    def load(cls) -> RunnerConfig:
        """Load configuration with layered priority.

        Returns:
            Merged RunnerConfig instance.
        """
        config_dict: dict[str, Any] = {}

        # Layer 1: Global config (~/.uirunner.yaml)
        if GLOBAL_CONFIG.exists():
            global_data = cls._load_yaml(GLOBAL_CONFIG)
            config_dict = cls._deep_merge(config_dict, global_data)

        # Layer 2: Project config (.uirunner.yaml)
        if PROJECT_CONFIG.exists():
            project_data = cls._load_yaml(PROJECT_CONFIG)
            config_dict = cls._deep_merge(config_dict, project_data)

        # Layer 3: Environment variables
        env_overrides = cls._get_env_overrides()
        config_dict = cls._deep_merge(config_dict, env_overrides)

        return cls._build_config(config_dict)

    @classmethod
    def _load_yaml(cls, path: Path) -> dict[str, Any]:
        """Load YAML file safely."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except (yaml.YAMLError, OSError):
            return {}

    @classmethod
    def _get_env_overrides(cls) -> dict[str, Any]:
        """Get configuration overrides from environment variables."""
        overrides: dict[str, Any] = {}

        direct = {
            "UIRUNNER_TEST_DIR": "test_dir",
            "UIRUNNER_RESULTS_DIR": "results_dir",
            "UIRUNNER_APP_ID": "app_id",
            "UIRUNNER_DEVICE": "device",
        }
        for env_name, key in direct.items():
            if env_name in os.environ:
                overrides[key] = os.environ[env_name]

        if "UIRUNNER_VERBOSE" in os.environ:
            overrides["verbose"] = _parse_bool(os.environ["UIRUNNER_VERBOSE"])

        if "UIRUNNER_RETRIES" in os.environ:
            overrides["retry"] = {"count": os.environ["UIRUNNER_RETRIES"]}

        if "UIRUNNER_MAESTRO_BIN" in os.environ:
            overrides["tools"] = {"maestro": os.environ["UIRUNNER_MAESTRO_BIN"]}

        return overrides

    @classmethod
    def _deep_merge(cls, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = cls._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @classmethod
    def _build_config(cls, config_dict: dict[str, Any]) -> RunnerConfig:
        """Build RunnerConfig from dictionary."""
        retry_dict = config_dict.get("retry")
        if not isinstance(retry_dict, dict):
            retry_dict = {}
        tools_dict = config_dict.get("tools")
        if not isinstance(tools_dict, dict):
            tools_dict = {}

        retry_count = _safe_int(retry_dict.get("count"), 2)
        retry = RetryConfig(
            count=retry_count if retry_count >= 0 else 2,
            delay=_parse_duration(retry_dict.get("delay"), 2.0),
        )

        defaults = ToolPaths()
        maestro_home = tools_dict.get("maestro_home")
        tools = ToolPaths(
            maestro=str(tools_dict.get("maestro") or defaults.maestro),
            maestro_home=Path(maestro_home).expanduser() if maestro_home else defaults.maestro_home,
            adb=str(tools_dict.get("adb") or defaults.adb),
            xcrun=str(tools_dict.get("xcrun") or defaults.xcrun),
            screencapture=str(tools_dict.get("screencapture") or defaults.screencapture),
            sw_vers=str(tools_dict.get("sw_vers") or defaults.sw_vers),
            pgrep=str(tools_dict.get("pgrep") or defaults.pgrep),
        )

        test_dir = config_dict.get("test_dir")
        results_dir = config_dict.get("results_dir")

        return RunnerConfig(
            test_dir=Path(test_dir) if test_dir else DEFAULT_TEST_DIR,
            results_dir=Path(results_dir) if results_dir else DEFAULT_RESULTS_DIR,
            app_id=config_dict.get("app_id"),
            device=config_dict.get("device"),
            verbose=_parse_bool(config_dict.get("verbose"), False),
            engine_timeout=_parse_duration(config_dict.get("engine_timeout"), 600.0),
            host_os=detect_host_os(),
            retry=retry,
            tools=tools,
        )


def setup_logging(verbose: bool, log_dir: Path | None) -> Path | None:
    """Configure file-based DEBUG logging.

    Args:
        verbose: Enable logging when True
        log_dir: Directory to write debug.log

    Returns:
        Path to log file if created, None otherwise
    """
    if not verbose or log_dir is None:
        return None

    log_file = log_dir / "debug.log"
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_file, mode="w")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s.%(msecs)03d [%(levelname)-5s] %(name)-22s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))

    # Clear existing handlers to prevent duplicates across runs
    root_logger = logging.getLogger("uirunner")
    for old in root_logger.handlers:
        old.close()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(handler)

    return log_file
