# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import time
import unittest
from unittest.mock import patch

from pricewatch.config.logging_config import setup_logging
from pricewatch.config.settings import Settings


def _reset_pricewatch_logger() -> None:
    root_logger = logging.getLogger("pricewatch")
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()


def _stderr_handlers() -> list[logging.Handler]:
    return [
        h
        for h in logging.getLogger("pricewatch").handlers
        if isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.FileHandler)
    ]


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour."""

    def setUp(self) -> None:
        """Start every test without pricewatch handlers."""
        _reset_pricewatch_logger()
        self.addCleanup(_reset_pricewatch_logger)

    def test_setup_creates_log_file(self) -> None:
        """setup_logging returns a path inside LOGS_DIR that exists."""
        log_path = setup_logging()
        self.assertTrue(log_path.exists())
        self.assertEqual(log_path.parent, Settings.LOGS_DIR)

    def test_log_file_naming(self) -> None:
        """Plain and command-tagged run log names."""
        self.assertRegex(setup_logging().name, r"^run_\d{8}_\d{6}\.log$")
        _reset_pricewatch_logger()
        self.assertRegex(
            setup_logging(command="watch").name,
            r"^run_\d{8}_\d{6}_watch\.log$",
        )

    def test_file_handler_level_debug_and_utc(self) -> None:
        """The file handler keeps everything, stamped in UTC."""
        setup_logging()
        file_handlers = [
            h
            for h in logging.getLogger("pricewatch").handlers
            if isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(file_handlers[0].level, logging.DEBUG)
        formatter = file_handlers[0].formatter
        assert formatter is not None
        self.assertIs(formatter.converter, time.gmtime)

    def test_console_level_default_warning(self) -> None:
        """stderr shows warnings and above by default."""
        with patch.object(Settings, "LOG_LEVEL", "WARNING"):
            setup_logging()
        [handler] = _stderr_handlers()
        self.assertEqual(handler.level, logging.WARNING)

    def test_console_level_from_settings(self) -> None:
        """PRICEWATCH_LOG_LEVEL picks the stderr threshold."""
        with patch.object(Settings, "LOG_LEVEL", "ERROR"):
            setup_logging()
        [handler] = _stderr_handlers()
        self.assertEqual(handler.level, logging.ERROR)

    def test_unknown_level_falls_back_to_warning(self) -> None:
        """A misspelt level name does not break startup."""
        with patch.object(Settings, "LOG_LEVEL", "CHATTY"):
            setup_logging()
        [handler] = _stderr_handlers()
        self.assertEqual(handler.level, logging.WARNING)

    def test_verbose_lowers_console_level(self) -> None:
        """verbose=True shows INFO on stderr."""
        setup_logging(verbose=True)
        [handler] = _stderr_handlers()
        self.assertEqual(handler.level, logging.INFO)

    def test_repeated_calls_reuse_handlers(self) -> None:
        """A second call keeps the handlers and returns the same file."""
        first = setup_logging()
        count_before = len(logging.getLogger("pricewatch").handlers)
        second = setup_logging(verbose=True)
        self.assertEqual(len(logging.getLogger("pricewatch").handlers), count_before)
        self.assertEqual(first, second)
        [handler] = _stderr_handlers()
        self.assertEqual(handler.level, logging.INFO)

    def test_child_loggers_reach_file(self) -> None:
        """Module loggers propagate into the per-run file."""
        log_path = setup_logging()
        logging.getLogger("pricewatch.storage").debug("store-opened-line")
        for handler in logging.getLogger("pricewatch").handlers:
            handler.flush()
        self.assertIn("store-opened-line", log_path.read_text(encoding="utf-8"))

    def test_old_logs_pruned(self) -> None:
        """Only the newest LOG_RETENTION run logs survive."""
        logs_dir = Settings.LOGS_DIR
        logs_dir.mkdir(parents=True, exist_ok=True)
        for day in range(1, 6):
            (logs_dir / f"run_2020010{day}_000000.log").write_text("")
        (logs_dir / "notes.txt").write_text("kept")

        with patch.object(Settings, "LOG_RETENTION", 3):
            current = setup_logging()

        remaining = sorted(p.name for p in logs_dir.glob("run_*.log"))
        self.assertEqual(len(remaining), 3)
        self.assertIn(current.name, remaining)
        self.assertIn("run_20200105_000000.log", remaining)
        self.assertIn("run_20200104_000000.log", remaining)
        self.assertTrue((logs_dir / "notes.txt").exists())


if __name__ == "__main__":
    unittest.main()
