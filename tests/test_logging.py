"""Tests for logging configuration."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest
from rich.console import Console

from assetpipe.logging import configure_logging


def _cleanup(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_configure_logging_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    logger = configure_logging()

    try:
        handler = next(h for h in logger.handlers if hasattr(h, "baseFilename"))
        log_path = Path(handler.baseFilename)
        assert log_path == tmp_path / "assetpipe.log"
        logger.info("Starting 'clean'...")
        assert log_path.exists()
        assert "Starting 'clean'..." in log_path.read_text(encoding="utf-8")
    finally:
        _cleanup(logger)


@pytest.mark.parametrize(
    "provided,expected",
    [
        (Path("custom.log"), "custom.log"),
        (Path("logs"), "logs/assetpipe.log"),
    ],
)
def test_configure_logging_with_override(tmp_path, monkeypatch, provided, expected):
    monkeypatch.chdir(tmp_path)
    logger = configure_logging(log_path=provided, level="debug")

    try:
        handler = next(h for h in logger.handlers if hasattr(h, "baseFilename"))
        log_path = Path(handler.baseFilename)
        assert log_path == tmp_path / expected
        assert logger.level == logging.DEBUG
    finally:
        _cleanup(logger)


def test_console_mirror_is_optional(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    logger = configure_logging(level="warn", mirror_to_console=False)
    try:
        assert logger.level == logging.WARNING
        assert all(hasattr(h, "baseFilename") for h in logger.handlers)
    finally:
        _cleanup(logger)

    logger = configure_logging()
    try:
        assert len(logger.handlers) == 2
    finally:
        _cleanup(logger)


def test_unknown_level_rejected(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValueError):
        configure_logging(level="loud")


def test_console_mirror_uses_task_lines(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)

    logger = configure_logging(console=console)
    try:
        logger.info("Starting 'build:styles'...")
        logger.error("Task 'copy:fonts' failed: missing")
    finally:
        _cleanup(logger)

    lines = buffer.getvalue().splitlines()
    assert lines[0].startswith("[")
    assert "Starting 'build:styles'..." in lines[0]
    assert "INFO" not in lines[0]
    assert "ERROR" in lines[1]
