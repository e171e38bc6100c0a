"""OpenTelemetry tracing for the API and its database engine."""

import logging
from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter

from bookshelf.core.config import Settings

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

# Interactive docs are not worth a span per asset request
EXCLUDED_URLS = "docs,redoc,openapi.json"

_tracer_provider: TracerProvider | None = None


def build_exporter(protocol: str, endpoint: str) -> SpanExporter:
    """Return the OTLP span exporter for the configured wire protocol."""
    if protocol == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    else:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

    return OTLPSpanExporter(endpoint=endpoint)


def setup_tracing(app: "FastAPI", engine: "AsyncEngine", settings: Settings) -> bool:
    """Trace book requests and the SQL statements they issue.

    Returns:
        True if tracing was switched on, False when ``otel_enabled`` is off.
    """
    global _tracer_provider

    if not settings.otel_enabled:
        logger.info("OpenTelemetry tracing is disabled")
        return False

    resource = Resource.create(
        {
            "service.name": settings.otel_service_name,
            "service.version": app.version,
            "deployment.environment": settings.environment,
        }
    )
    exporter = build_exporter(
        settings.otel_exporter_otlp_protocol, settings.otel_exporter_otlp_endpoint
    )
    _tracer_provider = TracerProvider(resource=resource)
    _tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(_tracer_provider)

    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

    FastAPIInstrumentor.instrument_app(
        app, tracer_provider=_tracer_provider, excluded_urls=EXCLUDED_URLS
    )
    SQLAlchemyInstrumentor().instrument(
        engine=engine.sync_engine, tracer_provider=_tracer_provider
    )

    logger.info(
        f"Tracing '{settings.otel_service_name}' via {settings.otel_exporter_otlp_protocol} "
        f"to {settings.otel_exporter_otlp_endpoint}"
    )
    return True


def shutdown_tracing() -> None:
    """Flush pending spans and release the tracer provider."""
    global _tracer_provider

    if _tracer_provider is None:
        return

    logger.info("Shutting down OpenTelemetry tracing")
    _tracer_provider.shutdown()
    _tracer_provider = None
