"""Centralized logging utilities for genomeannot.

Provides a single place to configure logging and fetch namespaced loggers.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"

# Log rotation settings
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def level_from_name(name: Optional[str], default: int = logging.WARNING) -> int:
    """Map a config-file level name ("info", "DEBUG", ...) to a logging level."""
    if not name:
        return default
    return LEVELS.get(str(name).upper(), default)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> None:
    """Configure logging for the 'genomeannot' namespace.

    Args:
        level: Logging level for the application logger
        log_file: Optional path for log file output
        max_bytes: Maximum size per log file before rotation (default: 10MB)
        backup_count: Number of backup files to keep (default: 5)

    Notes:
        - Root logger kept at WARNING to suppress third-party noise
        - Console handler uses concise format; file handler (if any) is detailed at DEBUG
        - Tool output is logged at DEBUG, so it only reaches the console with -vv
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)

    app_logger = logging.getLogger("genomeannot")
    # File handler records DEBUG regardless of console verbosity
    app_logger.setLevel(logging.DEBUG if log_file else level)
    for h in list(app_logger.handlers):
        app_logger.removeHandler(h)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    app_logger.addHandler(console)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            app_logger.addHandler(file_handler)
        except OSError as e:
            import warnings
            warnings.warn(f"Failed to create log file {log_file}: {e}")

    # Do not propagate to root to avoid double-printing
    app_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a namespaced logger under 'genomeannot' root."""
    base = logging.getLogger("genomeannot")
    return base.getChild(name)


class LogTemplates:
    """Standard log message templates for stage lifecycle and tool runs."""

    STAGE_START = "Running stage {index}/{total}: {stage}"
    STAGE_SUCCESS = "Completed stage: {stage} in {duration:.1f}s"
    STAGE_FAILURE = "Failed at stage: {stage} - {error}"
    STAGE_SKIPPED = "Skipping stage: {stage} - {reason}"

    TOOL_START = "[{stage}] {description}"
    TOOL_FAILURE = "[{stage}] {tool} failed with exit code {exit_code} (log: {log_file})"
