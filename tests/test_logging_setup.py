"""Tests for logging setup."""

import logging

from uirunner.core.config import setup_logging


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_logging_disabled_when_verbose_false(self, tmp_path):
        """No log file created when verbose=False."""
        assert setup_logging(verbose=False, log_dir=tmp_path) is None
        assert not (tmp_path / "debug.log").exists()

    def test_logging_writes_debug_messages(self, tmp_path):
        """DEBUG messages from uirunner.* loggers reach debug.log."""
        log_file = setup_logging(verbose=True, log_dir=tmp_path)

        logging.getLogger("uirunner.executor").debug("Test debug message")

        assert log_file == tmp_path / "debug.log"
        assert "Test debug message" in log_file.read_text()

    def test_creates_missing_dir(self, tmp_path):
        log_dir = tmp_path / "results"
        setup_logging(verbose=True, log_dir=log_dir)

        assert (log_dir / "debug.log").exists()

    def test_logging_does_nothing_when_log_dir_none(self):
        assert setup_logging(verbose=True, log_dir=None) is None

    def test_multiple_calls_no_duplicate_handlers(self, tmp_path):
        dir1 = tmp_path / "run1"
        dir2 = tmp_path / "run2"

        setup_logging(verbose=True, log_dir=dir1)
        setup_logging(verbose=True, log_dir=dir2)

        assert len(logging.getLogger("uirunner").handlers) == 1
