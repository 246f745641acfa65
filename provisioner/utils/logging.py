"""
Logging configuration and utilities.
"""

import logging
import logging.handlers
from datetime import datetime
from pathlib import Path
from typing import Optional


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def timestamped_log_path(log_file: Path, now: Optional[datetime] = None) -> Path:
    """
    Insert a run timestamp into a log file name.

    ``logs/provision.log`` becomes ``logs/provision-20250101-120000.log``.
    """
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    suffix = log_file.suffix or ".log"
    return log_file.with_name(f"{log_file.stem}-{stamp}{suffix}")


def setup_root_logger(log_file: Optional[Path] = None,
                      level: str = "INFO",
                      max_file_size_mb: int = 10,
                      backup_count: int = 5) -> None:
    """
    Set up the root logger for the application.

    Console output goes to stderr so that stdout stays free for reports.

    Args:
        log_file: Optional log file path
        level: Logging level
        max_file_size_mb: Size at which the log file rotates
        backup_count: Number of rotated files to keep
    """
    root_logger = logging.getLogger()

    # Clear any existing handlers
    root_logger.handlers.clear()

    root_logger.setLevel(getattr(logging, level.upper()))

    formatter = logging.Formatter(DEFAULT_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count
        )
        # File gets source locations as well
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
        ))
        root_logger.addHandler(file_handler)

    # Set levels for third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def format_failure(tool: str, phase: str, error_kind: str, message: str) -> str:
    """Structured one-line description of a failed tool step."""
    flat = " ".join(message.split())
    return f"FAILED tool={tool} phase={phase} error={error_kind} message={flat}"
