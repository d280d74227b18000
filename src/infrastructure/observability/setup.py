"""Logging and OpenTelemetry setup."""

import logging
from typing import TYPE_CHECKING

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio

from src.infrastructure.observability.structlog_processor import add_trace_context

if TYPE_CHECKING:
    from fastapi import FastAPI

# Module-level state for cleanup
_tracer_provider: TracerProvider | None = None
_initialized: bool = False


def configure_logging(*, debug: bool = False) -> None:
    """Configure structlog and standard library logging.

    Events get level, logger name, ISO timestamp and, inside a span, the
    trace context. Output is JSON, or colored console lines when debugging.
    """
    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


def init_observability(
    service_name: str,
    service_version: str,
    *,
    otlp_endpoint: str | None = None,
    console_export: bool = False,
    enabled: bool = True,
    sample_rate: float = 1.0,
    app: "FastAPI | None" = None,
) -> None:
    """Initialize OpenTelemetry tracing.

    Args:
        service_name: Name of the service for resource attribution.
        service_version: Version of the service.
        otlp_endpoint: OTLP collector endpoint (e.g., "http://localhost:4318").
        console_export: If True, export spans to console (for development).
        enabled: If False, a no-op tracer provider is installed.
        sample_rate: Sampling rate between 0.0 and 1.0.
        app: Optional FastAPI app instance to instrument.
    """
    global _tracer_provider, _initialized

    if _initialized:
        return

    if not enabled:
        trace.set_tracer_provider(trace.NoOpTracerProvider())
        _initialized = True
        return

    resource = Resource.create({SERVICE_NAME: service_name, SERVICE_VERSION: service_version})
    _tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBasedTraceIdRatio(sample_rate),
    )

    if console_export:
        _tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    if otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=f"{otlp_endpoint}/v1/traces")
        _tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    trace.set_tracer_provider(_tracer_provider)

    if app is not None:
        FastAPIInstrumentor.instrument_app(app)

    _initialized = True


def shutdown_observability() -> None:
    """Flush pending spans and shut the tracer provider down."""
    global _tracer_provider, _initialized

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        _tracer_provider = None

    _initialized = False
