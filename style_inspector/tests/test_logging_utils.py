from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from style_inspector.logging_utils import (
    LOG_FILENAME,
    LOGGER_NAME,
    PROPAGATE_ENV_VAR,
    build_rotating_file_handler,
    configure_logging,
    resolve_log_level,
)


def test_resolve_log_level() -> None:
    assert resolve_log_level(True) == logging.DEBUG
    assert resolve_log_level(False) == logging.INFO


def test_rotating_handler_clamps_retention(tmp_path: Path) -> None:
    handler = build_rotating_file_handler(tmp_path / "logs", retention=0, max_bytes=1024)
    try:
        assert isinstance(handler, RotatingFileHandler)
        assert handler.backupCount == 0
        assert handler.maxBytes == 1024
        assert Path(handler.baseFilename).name == LOG_FILENAME
    finally:
        handler.close()


def test_configure_logging_replaces_own_handler(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv(PROPAGATE_ENV_VAR, raising=False)
    logger = configure_logging(tmp_path, debug=True)
    configure_logging(tmp_path, debug=True)

    own = [handler for handler in logger.handlers if getattr(handler, "_style_inspector_handler", False)]
    assert len(own) == 1
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG
    assert logger.propagate is False

    logger.debug("hello %s", "log")
    own[0].flush()
    assert "hello log" in (tmp_path / LOG_FILENAME).read_text(encoding="utf-8")


def test_env_enables_propagation(monkeypatch) -> None:
    monkeypatch.setenv(PROPAGATE_ENV_VAR, "1")
    logger = configure_logging(None)
    assert logger.propagate is True
    assert logger.level == logging.INFO


def test_rotating_handler_creates_directory_and_counts_live_file(tmp_path: Path) -> None:
    log_dir = tmp_path / "nested" / "logs"
    handler = build_rotating_file_handler(log_dir, "custom.log", retention=3)
    try:
        assert log_dir.is_dir()
        assert handler.backupCount == 2
        assert Path(handler.baseFilename) == log_dir / "custom.log"
        assert handler.formatter is not None
    finally:
        handler.close()
