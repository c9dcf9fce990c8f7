"""Telemetry utilities for tracing instrumentation."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .config import TelemetrySettings

logger = logging.getLogger(__name__)

_TRACING_INITIALISED = False
_HTTPX_INSTRUMENTED = False


def init_tracing(settings: TelemetrySettings) -> None:
    """Configure the tracer provider when an OTLP endpoint is available.

    Without an endpoint (neither in settings nor in the standard ``OTEL_*``
    variables) tracing stays disabled and only a warning is logged.
    """

    global _TRACING_INITIALISED
    if _TRACING_INITIALISED:
        return

    service_name = settings.service_name
    effective_endpoint = (
        settings.exporter_endpoint
        or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        or os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")
    )
    if not effective_endpoint:
        logger.warning(
            "distributed tracing disabled; no OTLP endpoint configured",
            extra={"service_name": service_name},
        )
        return

    tracer_provider = TracerProvider(
        resource=Resource.create({"service.name": service_name})
    )
    try:
        span_exporter = OTLPSpanExporter(
            endpoint=effective_endpoint,
            headers=parse_exporter_headers(settings.exporter_headers),
        )
    except Exception:  # pragma: no cover - exporter misconfiguration
        logger.exception("failed to initialise OTLP span exporter; tracing disabled")
        return

    tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
    trace.set_tracer_provider(tracer_provider)
    _instrument_httpx()
    _TRACING_INITIALISED = True
    logger.info(
        "tracing initialised",
        extra={"service_name": service_name, "endpoint": effective_endpoint},
    )


def is_tracing_enabled() -> bool:
    """Return True when tracing has been initialised for the current process."""

    return _TRACING_INITIALISED


def instrument_fastapi_app(app: FastAPI) -> None:
    """Attach OpenTelemetry instrumentation to a FastAPI application."""

    tracer_provider = trace.get_tracer_provider()
    if isinstance(tracer_provider, TracerProvider):
        FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)
    else:
        FastAPIInstrumentor.instrument_app(app)


def _instrument_httpx() -> None:
    global _HTTPX_INSTRUMENTED
    if _HTTPX_INSTRUMENTED:
        return
    HTTPXClientInstrumentor().instrument()
    _HTTPX_INSTRUMENTED = True


def parse_exporter_headers(header_value: str | None) -> Mapping[str, str] | None:
    """Parse a comma-separated ``key=value`` header string for OTLP exporters."""

    if not header_value:
        return None

    headers: dict[str, str] = {}
    for part in (segment.strip() for segment in header_value.split(",")):
        if not part:
            continue
        if "=" not in part:
            logger.warning("ignoring malformed OTLP header segment", extra={"segment": part})
            continue
        key, value = part.split("=", 1)
        headers[key.strip()] = value.strip()
    return headers or None
