"""Package logger setup driven by ``log_level`` / ``log_format``."""

from __future__ import annotations

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per record, with lowercase level and logger name."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("timestamp", "time")
        super().__init__(*args, **kwargs)

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]) -> None:
        message_dict["level"] = record.levelname.lower()
        message_dict["logger"] = record.name

        super().add_fields(log_record, record, message_dict)


def configure_logging(level: str = "info", fmt: str = "text") -> logging.Logger:
    """Attach a single stderr handler to the ``permission_to_rest`` logger."""
    if level not in _LEVELS:
        raise ValueError(f"Unknown log level: {level!r} (valid: {list(_LEVELS)})")
    logger = logging.getLogger("permission_to_rest")
    logger.setLevel(_LEVELS[level])
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
