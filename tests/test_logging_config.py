"""Tests for the logging setup."""

import logging

import pytest

from market_chooser import logging_config
from market_chooser.logging_config import ColoredFormatter, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_file_logging(self, tmp_path, restore_root_logger):
        setup_logging(level="DEBUG", log_dir=str(tmp_path), log_file="run.log", console_output=False)
        get_logger("market_chooser.test").debug("Loaded %d markets", 3)
        for handler in restore_root_logger.handlers:
            handler.flush()

        text = (tmp_path / "run.log").read_text(encoding="utf-8")
        assert "DEBUG" in text
        assert "market_chooser.test" in text
        assert "Loaded 3 markets" in text

    def test_timestamped_file_name(self, tmp_path, restore_root_logger):
        setup_logging(log_dir=str(tmp_path), console_output=False)
        names = [p.name for p in tmp_path.iterdir()]
        assert len(names) == 1
        assert names[0].startswith("chooser_") and names[0].endswith(".log")

    def test_console_only_by_default(self, restore_root_logger):
        setup_logging(level="WARNING")
        assert restore_root_logger.level == logging.WARNING
        assert len(restore_root_logger.handlers) == 1
        assert not isinstance(restore_root_logger.handlers[0], logging.FileHandler)


class TestColoredFormatter:
    """Test suite for ColoredFormatter."""

    def test_colors_level_without_touching_record(self):
        formatter = ColoredFormatter("%(levelname)s | %(message)s")
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)
        text = formatter.format(record)

        assert "\033[33mWARNING\033[0m" in text
        assert record.levelname == "WARNING"


class TestLoggingSurface:
    """The logging module only exposes what the application calls."""

    def test_public_callables(self):
        public = {
            name for name, value in vars(logging_config).items()
            if callable(value) and not name.startswith("_")
            and getattr(value, "__module__", None) == logging_config.__name__
        }
        assert public == {"ColoredFormatter", "setup_logging", "get_logger"}
