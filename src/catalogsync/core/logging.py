"""Structlog configuration helpers with OpenTelemetry enrichment."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

from catalogsync.utils.tracing import TraceContext, get_current_trace_ids

_CONFIGURED = False


def _otel_enricher(
    _: Any,
    __: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Inject OpenTelemetry trace identifiers into the log event if available."""

    trace_context: TraceContext = get_current_trace_ids()
    if trace_context.get("trace_id"):
        event_dict.setdefault("trace_id", trace_context["trace_id"])
    if trace_context.get("span_id"):
        event_dict.setdefault("span_id", trace_context["span_id"])
    return event_dict


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: int | str = logging.INFO, *, json: bool = True) -> None:
    """Configure structlog with JSON (or console) output and OTEL context.

    Stdlib loggers used by the sync modules share the same level so that
    ``logger.warning(..., extra=...)`` calls surface next to structlog events.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    numeric_level = _resolve_level(level)
    logging.basicConfig(format="%(levelname)s %(name)s %(message)s", level=numeric_level)

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            _otel_enricher,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the provided name."""

    configure_logging()
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)
