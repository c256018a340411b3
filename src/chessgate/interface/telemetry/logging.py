from __future__ import annotations

from typing import Any
from uuid import uuid4
import logging
import sys
import structlog

TRACE_HEADER = "X-Trace-Id"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: int | str = "INFO") -> None:
    """Configure structlog to emit one JSON object per event on stdout."""
    min_level = _resolve_level(level)
    logging.basicConfig(format="%(message)s", level=min_level, stream=sys.stdout)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None):
    return structlog.get_logger(name or "chessgate")


def resolve_trace_id(header_value: str | None) -> str:
    """Reuse the caller's trace id when one was sent, otherwise mint one."""
    if header_value and header_value.strip():
        return header_value.strip()
    return uuid4().hex


def bind_trace(logger: Any, trace_id: str | None = None, **kwargs) -> Any:
    """Attach trace metadata to a logger for request correlation."""
    context = {"trace_id": trace_id} if trace_id else {}
    context.update(kwargs)
    return logger.bind(**context)


__all__ = ["TRACE_HEADER", "bind_trace", "get_logger", "resolve_trace_id", "setup_logging"]
