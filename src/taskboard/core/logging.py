"""JSON logging wired through ``logging.config.dictConfig``."""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from .config import Settings
from .context import UNSET, context_snapshot

_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}
_CONTEXT_FIELDS = ("request_id", "user_id")
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
# Warnings and above only.
_QUIET_LOGGERS = ("pymongo", "passlib", "multipart")
# Errors only.
_SILENCED_LOGGERS = ("passlib.handlers.bcrypt",)


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonLogFormatter(logging.Formatter):
    """Write one JSON object per record: fixed keys first, then ``extra`` fields."""

    def __init__(self, *, defaults: dict[str, Any] | None = None) -> None:
        super().__init__()
        self._static = dict(defaults or {})

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        entry: dict[str, Any] = {
            **self._static,
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _CONTEXT_FIELDS:
            entry[name] = _jsonable(getattr(record, name, UNSET))
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES and key not in entry:
                entry[key] = _jsonable(value)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack"] = self.formatStack(record.stack_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp records with the request id and acting user of the current request.

    Values passed explicitly through ``extra`` win over the bound context.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for name, value in context_snapshot().items():
            record.__dict__.setdefault(name, value)
        return True


def _logger(level: int) -> dict[str, Any]:
    return {"handlers": ["console"], "level": level, "propagate": False}


def build_logging_config(settings: Settings) -> dict[str, Any]:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    loggers = {name: _logger(level) for name in _SERVER_LOGGERS}
    loggers.update({name: _logger(logging.WARNING) for name in _QUIET_LOGGERS})
    loggers.update({name: _logger(logging.ERROR) for name in _SILENCED_LOGGERS})
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JsonLogFormatter,
                "defaults": {"service": settings.project_name, "environment": settings.environment},
            }
        },
        "filters": {"request_context": {"()": RequestContextFilter}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "json",
                "filters": ["request_context"],
                "level": level,
            }
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": loggers,
    }


def configure_logging(settings: Settings) -> None:
    """Route every logger through the JSON console handler."""

    logging.captureWarnings(True)
    logging.config.dictConfig(build_logging_config(settings))


__all__ = ["JsonLogFormatter", "RequestContextFilter", "build_logging_config", "configure_logging"]
