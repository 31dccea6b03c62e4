"""Logging setup for the SDK.

Library code only ever does `logging.getLogger(__name__)`; applications that
want SDK output call `configure_logging()` once at startup.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from aesdk.core.config import Settings, get_settings

ROOT_LOGGER = "aesdk"

_CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Attach a stream handler to the SDK logger.

    Args:
        settings: Settings to read level and format from (defaults to env)

    Returns:
        The configured `aesdk` logger
    """
    settings = settings or get_settings()
    logger = logging.getLogger(ROOT_LOGGER)

    for handler in list(logger.handlers):
        if getattr(handler, "_aesdk_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if settings.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    handler._aesdk_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
    return logger
