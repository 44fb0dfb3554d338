"""Structured JSON logging for the income calculation service."""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from contextvars import ContextVar, Token
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

__all__ = [
    "LOG_LEVEL_ENV",
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "reset_logging",
]

LOG_LEVEL_ENV = "UNCERTAIN_INCOME_LOG_LEVEL"
_LOGGER_PREFIX = "uncertainincome"


class LogContext:
    """Request-scoped fields merged into every log line."""

    _request_id: ContextVar[str | None] = ContextVar("log_request_id", default=None)
    _income_type: ContextVar[str | None] = ContextVar("log_income_type", default=None)

    _FIELD_NAMES = ("request_id", "income_type")

    @classmethod
    def set(
        cls,
        *,
        request_id: str | None = None,
        income_type: str | None = None,
    ) -> dict[str, Token[str | None]]:
        """Set context fields and return the tokens needed to restore them."""

        tokens: dict[str, Token[str | None]] = {}
        if request_id is not None:
            tokens["request_id"] = cls._request_id.set(request_id)
        if income_type is not None:
            tokens["income_type"] = cls._income_type.set(income_type)
        return tokens

    @classmethod
    def reset(cls, tokens: dict[str, Token[str | None]]) -> None:
        for name, token in tokens.items():
            getattr(cls, f"_{name}").reset(token)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        context: dict[str, str] = {}
        for name in cls._FIELD_NAMES:
            value = getattr(cls, f"_{name}").get()
            if value is not None:
                context[name] = value
        return context

    @classmethod
    def request_id(cls) -> str | None:
        return cls._request_id.get()

    @classmethod
    def clear(cls) -> None:
        for name in cls._FIELD_NAMES:
            getattr(cls, f"_{name}").set(None)


_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    def default(self, obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())

        for key, value in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            payload["exc_type"] = type(error).__name__
            payload["exc_message"] = str(error)
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder, default=str)


_configured = False
_lock = threading.Lock()


def _level_from_environment(default: int) -> int:
    raw = os.getenv(LOG_LEVEL_ENV)
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


def configure_logging(
    *,
    level: int | None = None,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach the JSON handler to the package logger hierarchy (idempotent)."""

    global _configured
    with _lock:
        if _configured:
            return

        package_logger = logging.getLogger(_LOGGER_PREFIX)
        package_logger.setLevel(
            level if level is not None else _level_from_environment(logging.INFO)
        )
        package_logger.propagate = False

        target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        target.setFormatter(StructuredFormatter())
        package_logger.addHandler(target)
        _configured = True


def reset_logging() -> None:
    """Undo :func:`configure_logging`; used by the test suite."""

    global _configured
    with _lock:
        _configured = False
        package_logger = logging.getLogger(_LOGGER_PREFIX)
        package_logger.handlers.clear()
        package_logger.setLevel(logging.NOTSET)
        package_logger.propagate = True
