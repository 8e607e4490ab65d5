"""
Centralized logging configuration for the Market Chooser.

Use `get_logger(__name__)` in each module to get a properly configured logger.

Usage:
    from market_chooser.logging_config import get_logger, setup_logging

    # At application startup (e.g., main.py)
    setup_logging(level="INFO")

    # In each module
    logger = get_logger(__name__)
    logger.info("Loaded %d markets", n_markets)
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Simple format for console (less verbose)
CONSOLE_FORMAT = "%(levelname)-8s | %(message)s"

_logging_configured = False


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name for terminal output."""

    COLORS = {
        logging.DEBUG: "\033[36m",     # Cyan
        logging.INFO: "\033[32m",      # Green
        logging.WARNING: "\033[33m",   # Yellow
        logging.ERROR: "\033[31m",     # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, self.RESET)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    colored: bool = True,
) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file name. If None but log_dir is set,
            a timestamped name is generated.
        log_dir: Directory for log files (created if it doesn't exist).
            No file logging when both log_file and log_dir are None.
        console_output: Whether to output to console (stderr)
        colored: Whether to use colored output in console

    Example:
        # Console only
        setup_logging()

        # Debug mode with file logging
        setup_logging(level="DEBUG", log_dir="logs", log_file="debug.log")
    """
    global _logging_configured

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)

        if colored and sys.stderr.isatty():
            formatter = ColoredFormatter(CONSOLE_FORMAT, LOG_DATE_FORMAT)
        else:
            formatter = logging.Formatter(CONSOLE_FORMAT, LOG_DATE_FORMAT)

        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file is not None or log_dir is not None:
        log_path = Path(log_dir or ".")
        log_path.mkdir(parents=True, exist_ok=True)

        if log_file is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = f"chooser_{timestamp}.log"

        file_handler = logging.FileHandler(log_path / log_file, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root_logger.addHandler(file_handler)

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance
    """
    if not _logging_configured:
        # Minimal console logging until setup_logging() is called
        logging.basicConfig(
            level=logging.INFO,
            format=CONSOLE_FORMAT,
            datefmt=LOG_DATE_FORMAT,
        )

    return logging.getLogger(name)
