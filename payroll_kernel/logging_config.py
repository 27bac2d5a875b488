"""
Structured JSON logging for the payroll kernel.

Every record is written as one JSON object per line:

    {"ts": "...", "level": "INFO", "logger": "payroll_kernel.services.coordinator",
     "message": "process_payroll_completed", "correlation_id": "...",
     "actor_id": "...", "period_id": "...", "duration_ms": 12.5}

Messages are snake_case event names (``period_created``,
``submit_overtime_rejected``).  Figures such as ids, dates and amounts
travel as ``extra`` fields and are never formatted into the message.
Coordinators bind the request-scoped fields once per operation with
``LogContext.bind`` and every line written inside carries them.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

_LOGGER_PREFIX = "payroll_kernel"


class LogContext:
    """
    Request-scoped log fields held in contextvars.

    Safe across threads and asyncio tasks: each sees only what it bound.
    The field set is closed; binding an unknown name is a programming error.
    """

    _vars: dict[str, ContextVar[str | None]] = {
        name: ContextVar(f"payroll_log_{name}", default=None)
        for name in ("correlation_id", "actor_id", "period_id", "payroll_id")
    }

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Bound fields only; unset fields are omitted."""
        fields: dict[str, str] = {}
        for name, var in cls._vars.items():
            value = var.get()
            if value is not None:
                fields[name] = value
        return fields

    @classmethod
    def clear(cls) -> None:
        for var in cls._vars.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type["LogContext"]]:
        """
        Bind fields for the duration of the block, then restore the outer values.

        Values are stored as strings; None leaves a field untouched.

        Raises:
            ValueError: If a field name is not a known context field.
        """
        unknown = sorted(set(fields) - set(cls._vars))
        if unknown:
            raise ValueError(f"Unknown log context fields: {', '.join(unknown)}")

        tokens = [
            (cls._vars[name], cls._vars[name].set(str(value)))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# Attributes every LogRecord has; anything else on a record came from ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    # Money and hours stay exact: Decimal is written as its string form.
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """One JSON line per record: envelope, bound context, extras, error."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in line:
                line[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            line.update(self._error_fields(record.exc_info[1]))
            line["traceback"] = self.formatException(record.exc_info)

        return json.dumps(line, default=_json_default)

    @staticmethod
    def _error_fields(exc: BaseException) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        # PayrollKernelError: code and kind are class attributes, the rest
        # (dates, ids, amounts) are set per instance.
        for attr in ("code", "kind"):
            if hasattr(exc, attr):
                fields[f"exc_{attr}"] = getattr(exc, attr)
        for key, value in vars(exc).items():
            if not key.startswith("_") and key != "args":
                fields[f"exc_{key}"] = value
        return fields


def get_logger(name: str) -> logging.Logger:
    """Logger ``payroll_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the ``payroll_kernel`` logger.

    Only the first call takes effect; later calls are no-ops until
    ``reset_logging()``.  Records do not propagate to the root logger.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.setLevel(level)
    kernel_logger.propagate = False

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    kernel_logger.addHandler(handler)


def reset_logging() -> None:
    """Undo configure_logging().  For tests."""
    global _configured
    with _lock:
        _configured = False
    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.handlers.clear()
    kernel_logger.setLevel(logging.WARNING)
