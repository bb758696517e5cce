"""Logging configuration helpers."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

WIRE_LOGGER_NAME = "sysbot_client.wire"
"""Logger receiving every command written and every raw reply read."""

_LOG_FILE_MAX_BYTES = 1024 * 1024
_LOG_FILE_BACKUPS = 3


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_wire: bool = False
) -> None:
    """Configure root logging handlers.

    Parameters
    ----------
    level:
        Log level name, e.g. "INFO". Unknown names fall back to INFO.
    log_path:
        Optional filesystem path for a rotating file handler. When absent,
        only console logging is configured.
    log_wire:
        When true, commands and raw replies are logged at DEBUG level on
        the ``sysbot_client.wire`` logger regardless of ``level``.
    """

    logging.captureWarnings(True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=_LOG_FILE_MAX_BYTES, backupCount=_LOG_FILE_BACKUPS
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    wire_logger = logging.getLogger(WIRE_LOGGER_NAME)
    wire_logger.setLevel(logging.DEBUG if log_wire else logging.WARNING)
    if not log_wire:
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
