"""
Structured JSON logging for the insurance kernel.

Every record is a single JSON line with the envelope ``ts``, ``level``,
``component`` (the logger name below ``insurance_kernel``) and ``message``,
followed by the scope the record was emitted in and the record's ``extra``.

Scope:
    ``run_id`` and ``pass_name`` while the reconciliation checker runs,
    ``contract_id`` and ``contract_number`` while one contract is handled,
    ``actor_id`` while an agent drives a service call. The scope lives in a
    single ContextVar holding an immutable tuple, so a nested
    ``LogContext.bind`` restores the outer scope exactly on exit, per thread
    and per task.

Rendering:
    Money renders as ``"10000.00 RUB"``, enums as their value, UUIDs, dates
    and Decimals as strings. Kernel errors add ``error_code`` and their
    public attributes under ``error_fields``.
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
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

_LOGGER_PREFIX = "insurance_kernel"

SCOPE_FIELDS = ("run_id", "pass_name", "contract_id", "contract_number", "actor_id")

_scope: ContextVar[tuple[tuple[str, str], ...]] = ContextVar("log_scope", default=())


class LogContext:
    """Scope fields attached to every record logged inside a ``bind`` block."""

    @staticmethod
    def current() -> dict[str, str]:
        return dict(_scope.get())

    @staticmethod
    def clear() -> None:
        _scope.set(())

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[None]:
        """
        Add fields to the scope for the duration of the block.

        None values are ignored. Unknown field names raise TypeError.
        """
        unknown = set(fields) - set(SCOPE_FIELDS)
        if unknown:
            raise TypeError(f"Unknown log scope fields: {', '.join(sorted(unknown))}")

        merged = dict(_scope.get())
        merged.update({k: str(v) for k, v in fields.items() if v is not None})
        token = _scope.set(tuple(merged.items()))
        try:
            yield
        finally:
            _scope.reset(token)

    @classmethod
    def contract(cls, contract: Any):
        """Bind ``contract_id`` and, once registered, ``contract_number``."""
        return cls.bind(contract_id=contract.id, contract_number=contract.number)


def _render(value: Any) -> Any:
    # Local import: domain modules log through this module.
    from insurance_kernel.domain.values import Money

    if isinstance(value, Money):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _render(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_render(v) for v in value]
    return value


_RECORD_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        component = record.name
        if component.startswith(f"{_LOGGER_PREFIX}."):
            component = component[len(_LOGGER_PREFIX) + 1:]

        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "component": component,
            "message": record.getMessage(),
        }
        payload.update(_scope.get())

        for key, value in vars(record).items():
            if key not in _RECORD_KEYS and key not in payload:
                payload[key] = _render(value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    from insurance_kernel.exceptions import InsuranceKernelError

    fields: dict[str, Any] = {"exc_type": type(exc).__name__, "exc_message": str(exc)}
    if isinstance(exc, InsuranceKernelError):
        fields["error_code"] = exc.code
        public = {k: _render(v) for k, v in vars(exc).items() if not k.startswith("_")}
        if public:
            fields["error_fields"] = public
    return fields


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the insurance_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def _installed(root: logging.Logger) -> list[logging.Handler]:
    return [h for h in root.handlers if isinstance(h.formatter, StructuredFormatter)]


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Send the insurance_kernel hierarchy to one JSON handler.

    A second call only adjusts the level; the handler is installed once.
    """
    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    if _installed(root):
        return

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root.addHandler(h)
    root.propagate = False


def reset_logging() -> None:
    """Remove the JSON handler and restore propagation (test cleanup)."""
    root = logging.getLogger(_LOGGER_PREFIX)
    for h in _installed(root):
        root.removeHandler(h)
    root.setLevel(logging.WARNING)
    root.propagate = True
