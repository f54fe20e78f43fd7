"""
Structured JSON logging for the approval kernel.

Every record under the ``approval_kernel`` logger namespace is written as
one JSON object per line::

    {"ts": "...", "level": "INFO", "logger": "approval_kernel.services.invoice",
     "message": "workflow_rule_selected", "correlation_id": "...",
     "company_name": "Light", "rule_id": 4, "specificity": 1}

Request-scoped fields (``correlation_id``, ``company_name``, ``actor``,
``command``) come from ``LogContext``; anything passed as ``extra`` is
merged in; exceptions contribute their type, message, ``code`` and public
attributes.
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
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

_LOGGER_PREFIX = "approval_kernel"

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

CONTEXT_FIELDS = ("correlation_id", "company_name", "actor", "command")

_context: dict[str, ContextVar[str | None]] = {
    field: ContextVar(f"approval_log_{field}", default=None)
    for field in CONTEXT_FIELDS
}


class LogContext:
    """Request-scoped log fields, isolated per thread and per asyncio task."""

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set context fields.  None leaves a field unchanged.

        Raises:
            TypeError: for a name outside ``CONTEXT_FIELDS``.
        """
        for field, value in fields.items():
            if field not in _context:
                raise TypeError(f"unknown log context field: {field}")
            if value is not None:
                _context[field].set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        """Return the fields that are currently set."""
        values = {field: var.get() for field, var in _context.items()}
        return {field: value for field, value in values.items() if value is not None}

    @staticmethod
    def clear() -> None:
        for var in _context.values():
            var.set(None)

    @staticmethod
    def bind(**fields: str | None) -> "_BoundContext":
        """Set fields for the duration of a ``with`` block.

        None values and unknown names are skipped; on exit every field
        returns to its previous value.
        """
        return _BoundContext(fields)


class _BoundContext:
    def __init__(self, fields: dict[str, str | None]):
        self._fields = {
            k: v for k, v in fields.items() if k in _context and v is not None
        }
        self._tokens: list[tuple[ContextVar[str | None], Token]] = []

    def __enter__(self) -> type[LogContext]:
        for field, value in self._fields.items():
            var = _context[field]
            self._tokens.append((var, var.set(value)))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

# attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # structured attributes of ApprovalKernelError subclasses
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Logger factory and initialization
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Return ``approval_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``approval_kernel`` logger.

    Only the first call has an effect until ``reset_logging`` runs.  Records
    do not propagate to the root logger.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(handler)


def reset_logging() -> None:
    """Drop handlers and forget the configuration (tests only)."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
