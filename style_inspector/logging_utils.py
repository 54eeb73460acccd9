from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "StyleInspector.Engine"
PROPAGATE_ENV_VAR = "STYLE_INSPECTOR_PROPAGATE_LOGS"
LOG_FILENAME = "style-inspector.log"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def _env_flag(name: str) -> bool:
    value = os.getenv(name)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def resolve_log_level(debug_enabled: bool) -> int:
    """Return DEBUG when tracing is requested, INFO otherwise."""
    return logging.DEBUG if debug_enabled else logging.INFO


def build_rotating_file_handler(
    log_dir: Path,
    filename: str = LOG_FILENAME,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """File sink for ``--log-dir`` runs of the inspector CLI.

    ``retention`` counts the live file plus its rotated backups, so 1 keeps a
    single file that is truncated on rollover.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(log_dir / filename),
        maxBytes=max(0, max_bytes),
        backupCount=max(1, retention) - 1,
        encoding="utf-8",
    )
    handler.setFormatter(formatter or logging.Formatter(LOG_FORMAT))
    return handler


def configure_logging(log_dir: Optional[Path], *, debug: bool = False) -> logging.Logger:
    """Attach handlers to the engine logger; safe to call more than once."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug))
    logger.propagate = _env_flag(PROPAGATE_ENV_VAR)
    formatter = logging.Formatter(LOG_FORMAT)
    for handler in list(logger.handlers):
        if getattr(handler, "_style_inspector_handler", False):
            logger.removeHandler(handler)
            handler.close()
    if log_dir is not None:
        handler = build_rotating_file_handler(log_dir, formatter=formatter)
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
    handler._style_inspector_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
