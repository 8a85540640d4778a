"""JSON logging for the plan engine service.

Every record is one JSON object. Fields bound with ``bind_log_context``
(request id, user id, plan id) are attached to every record emitted in
the same request; per-call details travel as ``ctx_*`` extras.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

_NOISY_LOGGERS = ("sqlalchemy.engine", "alembic", "uvicorn.access")

_log_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar("log_context", default={})


def bind_log_context(**fields: Any) -> contextvars.Token:
    """Add fields to the current log context; pass the token to ``reset_log_context``."""
    merged = {**_log_context.get(), **{k: v for k, v in fields.items() if v is not None}}
    return _log_context.set(merged)


def reset_log_context(token: contextvars.Token) -> None:
    _log_context.reset(token)


def current_log_context() -> dict[str, Any]:
    return dict(_log_context.get())


def get_request_id() -> Optional[str]:
    return _log_context.get().get("request_id")


def new_request_id() -> str:
    return uuid4().hex


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with bound context and ``ctx_*`` extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        entry.update(_log_context.get())
        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            entry["exception"] = {"type": type(exc).__name__, "message": str(exc)}
        context = {k: v for k, v in vars(record).items() if k.startswith("ctx_")}
        if context:
            entry["context"] = context
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Send JSON logs to stdout. A root logger that already has handlers is left alone."""
    root = logging.getLogger()
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
