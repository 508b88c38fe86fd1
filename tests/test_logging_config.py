# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from src.config.logging_config import ROOT_LOGGER_NAME, setup_logging


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour against a temporary logs dir."""

    def setUp(self) -> None:
        """Point LOGS_DIR at a temp dir and reset project handlers."""
        self.tmp_dir = Path(tempfile.mkdtemp()) / "logs"
        patcher = patch(
            "src.config.settings.Settings.LOGS_DIR", self.tmp_dir
        )
        patcher.start()
        self.addCleanup(patcher.stop)
        self.root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        self._clear_handlers()
        self.addCleanup(self._clear_handlers)

    def _clear_handlers(self) -> None:
        for handler in list(self.root_logger.handlers):
            handler.close()
            self.root_logger.removeHandler(handler)

    def test_setup_creates_logs_dir_and_file(self) -> None:
        """The logs dir is created and the run file exists."""
        log_path = setup_logging()
        self.assertTrue(self.tmp_dir.is_dir())
        self.assertTrue(log_path.exists())
        self.assertEqual(log_path.parent, self.tmp_dir)

    def test_log_file_naming_convention(self) -> None:
        """Log file name matches run_YYYYMMDD_HHMMSS.log format."""
        log_path = setup_logging()
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_handler_levels(self) -> None:
        """File handler logs DEBUG+, console handler WARNING+."""
        setup_logging()
        file_handlers = [
            h
            for h in self.root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        console_handlers = [
            h
            for h in self.root_logger.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(len(console_handlers), 1)
        self.assertEqual(file_handlers[0].level, logging.DEBUG)
        self.assertEqual(console_handlers[0].level, logging.WARNING)
        self.assertEqual(self.root_logger.level, logging.DEBUG)

    def test_repeated_calls_no_duplicate_handlers(self) -> None:
        """Calling setup_logging twice does not duplicate handlers."""
        setup_logging()
        count_before = len(self.root_logger.handlers)
        setup_logging()
        self.assertEqual(len(self.root_logger.handlers), count_before)

    def test_child_logger_writes_to_run_file(self) -> None:
        """Module loggers under precios_cr.* land in the run file."""
        log_path = setup_logging()
        logging.getLogger("precios_cr.orchestrator").debug(
            "fan-out trace for gollo"
        )
        for handler in self.root_logger.handlers:
            handler.flush()
        content = log_path.read_text(encoding="utf-8")
        self.assertIn("fan-out trace for gollo", content)
        self.assertIn("precios_cr.orchestrator", content)


if __name__ == "__main__":
    unittest.main()
