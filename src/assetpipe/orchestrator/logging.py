"""Process-wide logging setup.

Console output is configured once with `logging.basicConfig`, at the level
named by `ASSETPIPE_LOG_LEVEL`. Build output can also be mirrored to a
rotating file, taken from `logging.file` in the config or `ASSETPIPE_LOG_FILE`.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import os


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LEVEL_ENV = "ASSETPIPE_LOG_LEVEL"
FILE_ENV = "ASSETPIPE_LOG_FILE"

_configured = False


def _ensure_base_logger() -> None:
    global _configured
    if _configured:
        return
    level = os.getenv(LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
    )
    _configured = True


def get_logger(name: str) -> logging.Logger:
    _ensure_base_logger()
    return logging.getLogger(name)


def add_log_file(
    log_file: str | Path, max_bytes: int = 1_000_000, backup_count: int = 3
) -> RotatingFileHandler:
    """Attach a rotating file handler to the root logger.

    Calling it again for the same file returns the handler already attached.
    """
    _ensure_base_logger()
    root = logging.getLogger()
    path = Path(log_file).resolve()
    for h in root.handlers:
        if isinstance(h, RotatingFileHandler) and Path(h.baseFilename) == path:
            return h
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return handler
