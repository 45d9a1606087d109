"""OpenTelemetry and structured logging setup for the kiosk engine.

Spans and metrics are exported over OTLP/HTTP; tests run with bare providers.
"""

import logging
import os
import sys
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger import jsonlogger

logger = logging.getLogger(__name__)

DEFAULT_OTLP_ENDPOINT = "http://localhost:4318"


def _otlp_endpoint() -> str:
    return os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", DEFAULT_OTLP_ENDPOINT).rstrip("/")


def get_service_resource() -> Resource:
    """Describe this kiosk to the telemetry backend.

    Returns:
        Resource naming the service, its environment and the outlet it serves
    """
    return Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", "walkin-pos"),
            "deployment.environment": os.getenv("ENVIRONMENT", "development"),
            "outlet.id": os.getenv("OUTLET_ID", "4"),
            "outlet.name": os.getenv("OUTLET_NAME", ""),
        }
    )


def build_tracer_provider(resource: Resource, export: bool) -> TracerProvider:
    """Create the tracer provider, batching spans to OTLP when ``export`` is set."""
    provider = TracerProvider(resource=resource)
    if export:
        exporter = OTLPSpanExporter(endpoint=f"{_otlp_endpoint()}/v1/traces")
        provider.add_span_processor(BatchSpanProcessor(exporter))
    return provider


def build_meter_provider(resource: Resource, export: bool) -> MeterProvider:
    """Create the meter provider, pushing to OTLP periodically when ``export`` is set.

    The interval comes from ``OTEL_METRIC_EXPORT_INTERVAL`` in milliseconds.
    """
    if not export:
        return MeterProvider(resource=resource)

    interval_ms = int(os.getenv("OTEL_METRIC_EXPORT_INTERVAL", "60000"))
    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=f"{_otlp_endpoint()}/v1/metrics"),
        export_interval_millis=interval_ms,
    )
    return MeterProvider(resource=resource, metric_readers=[reader])


def setup_observability(app: Any = None, enable_exporters: bool = True) -> None:
    """Install tracing and metrics providers and auto-instrument HTTP traffic.

    Catalog, order, print-server and probe requests all go through httpx, so
    instrumenting httpx covers every outbound call.

    Args:
        app: Optional FastAPI application to instrument
        enable_exporters: Ship telemetry over OTLP (always off when ENVIRONMENT=test)
    """
    export = enable_exporters and os.getenv("ENVIRONMENT", "development") != "test"
    resource = get_service_resource()

    trace.set_tracer_provider(build_tracer_provider(resource, export))
    metrics.set_meter_provider(build_meter_provider(resource, export))

    instrumentor = HTTPXClientInstrumentor()
    if not instrumentor.is_instrumented_by_opentelemetry:
        instrumentor.instrument()

    if app is not None:
        FastAPIInstrumentor.instrument_app(app)

    if export:
        logger.info(f"Telemetry exported to {_otlp_endpoint()}")
    else:
        logger.info("Telemetry collected without exporters")


def configure_logging(log_level: str = "INFO") -> None:
    """Route all log records to stdout as JSON lines.

    ``LOG_LEVEL`` overrides ``log_level``. Existing root handlers are replaced,
    so calling this twice does not duplicate output.

    Args:
        log_level: Fallback level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level_name = os.getenv("LOG_LEVEL", log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        rename_fields={"levelname": "level", "name": "logger"},
        static_fields={"service": "walkin-pos"},
        timestamp=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    logger.info(f"JSON logging at {level_name}")
