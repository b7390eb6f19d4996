"""
Structured JSON logging for the forecaster.

Every line is one JSON object:

    {"ts": ..., "level": "INFO", "logger": "pcb.engine.runner",
     "event": "forecast_built",
     "run": {"run_date": "2026-01-01", "window_start": ..., "window_end": ...,
             "buffer_threshold": 100.0},
     ...extra= fields}

The ``run`` block is present while a forecast is bound with ``bind_run`` (the
runner does this for the duration of ``run_forecast``), so records logged deep
inside the collector or the allocator still say which window they belong to.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterator, Optional

__all__ = [
    "StructuredFormatter",
    "bind_run",
    "current_run",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

_LOGGER_PREFIX = "pcb"

# attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}

_run: ContextVar[Optional[Dict[str, Any]]] = ContextVar("pcb_run", default=None)


@contextmanager
def bind_run(context) -> Iterator[Dict[str, Any]]:
    """Attach a RunContext's date, window and buffer to every record logged inside the block."""
    fields = {
        "run_date": context.run_date,
        "window_start": context.window_start,
        "window_end": context.window_end,
        "buffer_threshold": context.buffer_threshold,
    }
    token = _run.set(fields)
    try:
        yield fields
    finally:
        _run.reset(token)


def current_run() -> Optional[Dict[str, Any]]:
    return _run.get()


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }

        run = current_run()
        if run is not None:
            payload["run"] = dict(run)

        for key, val in vars(record).items():
            if key not in _RECORD_ATTRS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            # ForecastError subclasses carry a stable code
            code = getattr(exc, "code", None)
            if code is not None:
                payload["exc_code"] = code
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_jsonable)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the pcb namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Attach one JSON handler to the pcb logger tree; later calls are no-ops."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root.addHandler(h)


def reset_logging() -> None:
    """Undo configure_logging. Tests only."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.propagate = True
