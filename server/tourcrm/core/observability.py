"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging
import time
from typing import Any, Dict, Optional

from opentelemetry import trace, metrics
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CollectorRegistry
import structlog

from .config import settings

# Prometheus metrics
REGISTRY = CollectorRegistry()

# Request metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=REGISTRY
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=REGISTRY
)

# Business metrics
QUOTATIONS_TRANSITIONED = Counter(
    'quotations_transitioned_total',
    'Quotation status transitions',
    ['to_status'],
    registry=REGISTRY
)

BOOKINGS_CREATED = Counter(
    'bookings_created_total',
    'Total bookings created',
    ['source'],
    registry=REGISTRY
)

PAYMENTS_RECORDED = Counter(
    'payments_recorded_total',
    'Total payments recorded',
    ['direction'],
    registry=REGISTRY
)

PAYMENT_AMOUNT = Histogram(
    'client_payment_amount_eur',
    'Client payment amounts in EUR',
    buckets=(50, 100, 250, 500, 1000, 2500, 5000, 10000, 25000),
    registry=REGISTRY
)

IDEMPOTENT_REPLAYS = Counter(
    'idempotent_replays_total',
    'Responses served from a stored idempotency key',
    ['path'],
    registry=REGISTRY
)

RATE_OVERLAPS_REJECTED = Counter(
    'rate_overlaps_rejected_total',
    'Seasonal rates rejected for overlapping an active rate',
    ['rate_type'],
    registry=REGISTRY
)

RETENTION_ROWS = Counter(
    'retention_rows_total',
    'Rows archived or deleted by retention runs',
    ['action'],
    registry=REGISTRY
)

LAST_RETENTION_RUN = Gauge(
    'retention_last_run_timestamp_seconds',
    'Unix time of the last retention run',
    ['job'],
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_tracing(app_name: str = "tour-crm-api"):
    """Setup OpenTelemetry tracing."""

    # Create resource
    resource = Resource.create({
        "service.name": app_name,
        "service.version": "1.0.0",
        "environment": settings.environment,
    })

    # Setup tracer provider
    trace.set_tracer_provider(TracerProvider(resource=resource))

    # Setup OTLP exporter (if OTLP endpoint is configured)
    if hasattr(settings, 'otlp_endpoint') and settings.otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
        span_processor = BatchSpanProcessor(otlp_exporter)
        trace.get_tracer_provider().add_span_processor(span_processor)

    # Get tracer
    tracer = trace.get_tracer(__name__)
    return tracer


def setup_metrics(app_name: str = "tour-crm-api"):
    """Setup OpenTelemetry metrics."""

    # Create resource
    resource = Resource.create({
        "service.name": app_name,
        "service.version": "1.0.0",
        "environment": settings.environment,
    })

    # Setup OTLP metric exporter (if configured)
    if hasattr(settings, 'otlp_endpoint') and settings.otlp_endpoint:
        otlp_exporter = OTLPMetricExporter(endpoint=settings.otlp_endpoint)
        reader = PeriodicExportingMetricReader(exporter=otlp_exporter, export_interval_millis=60000)
        metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))

    # Get meter
    meter = metrics.get_meter(__name__)
    return meter


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy():
    """Instrument SQLAlchemy with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument()


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_quotation_transition(to_status: str):
        """Record a quotation moving to ``to_status``."""
        QUOTATIONS_TRANSITIONED.labels(to_status=to_status).inc()

    @staticmethod
    def record_booking_created(source: str = "quotation"):
        """Record a booking creation."""
        BOOKINGS_CREATED.labels(source=source).inc()

    @staticmethod
    def record_client_payment(amount_eur: float):
        PAYMENTS_RECORDED.labels(direction="client").inc()
        PAYMENT_AMOUNT.observe(amount_eur)

    @staticmethod
    def record_vendor_payment():
        PAYMENTS_RECORDED.labels(direction="vendor").inc()

    @staticmethod
    def record_idempotent_replay(path: str):
        IDEMPOTENT_REPLAYS.labels(path=path).inc()

    @staticmethod
    def record_rate_overlap(rate_type: str):
        RATE_OVERLAPS_REJECTED.labels(rate_type=rate_type).inc()

    @staticmethod
    def record_retention(action: str, count: int):
        """Add ``count`` rows to the retention counter for ``action``."""
        if count > 0:
            RETENTION_ROWS.labels(action=action).inc(count)

    @staticmethod
    def set_last_retention_run(job: str):
        LAST_RETENTION_RUN.labels(job=job).set(time.time())


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()


class StructuredLogger:
    """Structured logger with business context."""

    def __init__(self, name: str, bound_logger=None):
        self.name = name
        self.logger = bound_logger if bound_logger is not None else structlog.get_logger(name)

    def info(self, message: str, **kwargs):
        """Log info message with context."""
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with context."""
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with context."""
        self.logger.error(message, **kwargs)

    def debug(self, message: str, **kwargs):
        """Log debug message with context."""
        self.logger.debug(message, **kwargs)

    def with_context(self, **kwargs):
        """Add context to logger."""
        return StructuredLogger(self.name, self.logger.bind(**kwargs))


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name)