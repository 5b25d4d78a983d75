"""Process-wide logging for the register API."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from buku_apel.utils.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Client libraries used by the dashboard and tests log every request at INFO.
_QUIET_LOGGERS = ("httpx", "urllib3")

_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None, log_file: Optional[Path] = None) -> None:
    """Configure the root logger once.

    Records go to stdout, and also to ``LOG_FILE`` when set, so submit and
    unlock events survive a restart of the duty-room machine.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()
    resolved_file = log_file or settings.log_file

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if resolved_file is not None:
        resolved_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(resolved_file, encoding="utf-8"))

    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, handlers=handlers)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
