from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from .config import LoggingSettings, get_settings

HANDLER_NAME = "heap_scheduler"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-request chatter from the HTTP stack drowns out scheduler events at INFO.
_QUIET_LOGGERS = ("httpx", "hypercorn.access")


def _build_handlers(log_file: Path) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [
        RotatingFileHandler(str(log_file), maxBytes=1_000_000, backupCount=5, encoding="utf-8"),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(formatter)
    return handlers


def configure_logging(settings: Optional[LoggingSettings] = None) -> Path:
    """Route the root logger to the rotating file and console named by ``settings``.

    Calling it again swaps out the handlers installed by the previous call, so the
    log file can follow a data-file override. Returns the log file in use.
    """

    settings = settings or get_settings().logging
    log_file = settings.log_file
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(handler)
        handler.close()
    for handler in _build_handlers(log_file):
        root.addHandler(handler)
    root.setLevel(getattr(logging, settings.level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging to %s at %s", log_file, settings.level)
    return log_file


__all__ = ["configure_logging"]
