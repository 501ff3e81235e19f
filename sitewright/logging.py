"""Logging setup for the sitewright package.

Modules log through ``logging.getLogger(__name__)``; this module only wires
handlers onto the package root logger, driven by ``log_level`` and
``log_format`` from the config.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TextIO

_root_logger = logging.getLogger("sitewright")

# Config uses "warn"; logging wants "WARNING".
_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(
    level: str | int = "info",
    format: str = "text",
    stream: TextIO | None = None,
) -> None:
    """Configure the package root logger.

    Args:
        level: Config level name (debug, info, warn, error) or an int.
        format: "text" or "json".
        stream: Output stream (defaults to stderr).
    """
    if isinstance(level, str):
        level = _LEVELS.get(level.lower(), logging.INFO)

    _root_logger.setLevel(level)
    _root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    if format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    handler.setLevel(level)
    _root_logger.addHandler(handler)
