"""Logging setup: a rotating build log plus a task-runner style console mirror."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "assetpipe"
LOG_FILENAME = f"{LOGGER_NAME}.log"
LOG_FORMAT = "%(asctime)s %(process)08x %(levelname).1s %(module)s %(message)s"
CONSOLE_TIME_FORMAT = "[%H:%M:%S]"
MAX_BYTES = 2 * 1024 * 1024
BACKUP_COUNT = 5


def configure_logging(
    log_path: Path | None = None,
    level: str = "INFO",
    mirror_to_console: bool = True,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the ``assetpipe`` logger and return it.

    Every record goes to ``assetpipe.log`` (rotated at 2 MiB, five backups). With
    ``mirror_to_console`` the same records are echoed through rich as short
    ``[12:00:01] Starting 'clean'...`` lines; warnings and errors keep their level
    column so failed tasks stand out in a watch session.

    Calling this again replaces the handlers installed by the previous call.
    """

    logger = logging.getLogger(LOGGER_NAME)
    _reset_handlers(logger)
    logger.propagate = False

    numeric_level = _normalize_level(level)
    logger.setLevel(numeric_level)
    logger.addHandler(_file_handler(_resolve_log_path(log_path), numeric_level))
    if mirror_to_console:
        logger.addHandler(_console_handler(console or Console(stderr=True), numeric_level))
    return logger


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def _file_handler(path: Path, level: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


class _TaskLineHandler(RichHandler):
    """Rich handler that shows the level column only for warnings and errors."""

    def get_level_text(self, record: logging.LogRecord):  # type: ignore[no-untyped-def]
        if record.levelno < logging.WARNING:
            return ""
        return super().get_level_text(record)


def _console_handler(console: Console, level: int) -> logging.Handler:
    handler = _TaskLineHandler(
        console=console,
        show_path=False,
        markup=False,
        log_time_format=CONSOLE_TIME_FORMAT,
        omit_repeated_times=False,
    )
    handler.setLevel(level)
    return handler


def _normalize_level(level: str) -> int:
    """Convert ``debug``/``warn``/``ERROR`` style names to logging constants."""

    candidate = level.strip().upper()
    if candidate == "WARN":
        candidate = "WARNING"
    numeric = getattr(logging, candidate, None)
    if not isinstance(numeric, int):
        raise ValueError(f"Unsupported log level: {level!r}")
    return numeric


def _resolve_log_path(log_path: Path | None) -> Path:
    """A directory (or suffix-less path) gets ``assetpipe.log`` inside it."""

    if log_path is None:
        return Path.cwd() / LOG_FILENAME

    candidate = log_path if log_path.is_absolute() else Path.cwd() / log_path
    if candidate.is_dir() or candidate.suffix == "":
        return candidate / LOG_FILENAME
    return candidate
