"""Logging setup for hook runs.

Warnings always go to stderr. With debug enabled, everything is also written
to <log_path>/claw-hooks.log, rotated daily, and log files older than two
days are removed.
"""

from __future__ import annotations

import logging
import sys
import time
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

logger = logging.getLogger(__name__)

LOGGER_NAME = "claw_hooks"
LOG_FILE_PREFIX = "claw-hooks"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
RETENTION_DAYS = 2


def cleanup_old_logs(log_path: Path, max_age_days: int = RETENTION_DAYS) -> int:
    """Delete claw-hooks* files in log_path older than max_age_days.

    Returns the number of files removed. Errors are ignored so that logging
    housekeeping never breaks a hook.
    """
    cutoff = time.time() - max_age_days * 24 * 60 * 60
    removed = 0
    try:
        candidates = list(log_path.glob(f"{LOG_FILE_PREFIX}*"))
    except OSError:
        return 0

    for candidate in candidates:
        try:
            if candidate.is_file() and candidate.stat().st_mtime < cutoff:
                candidate.unlink()
                removed += 1
        except OSError:
            continue
    return removed


def setup_logging(debug: bool = False, log_path: Path | None = None, quiet: bool = False) -> None:
    """Configure the claw_hooks package logger.

    Args:
        debug: Also log DEBUG and up to a daily rotating file.
        log_path: Directory for the log file (required for file logging).
        quiet: Only report errors on stderr.
    """
    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = False
    package_logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR if quiet else logging.WARNING)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    package_logger.addHandler(stderr_handler)

    if not debug or log_path is None:
        return

    removed = cleanup_old_logs(log_path)
    try:
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_path / f"{LOG_FILE_PREFIX}.log",
            when="midnight",
            backupCount=RETENTION_DAYS,
            encoding="utf-8",
        )
    except OSError as e:
        logger.warning(f"File logging disabled, cannot open {log_path}: {e}")
        return

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(file_handler)

    if removed:
        logger.debug(f"Removed {removed} old log file(s) from {log_path}")
