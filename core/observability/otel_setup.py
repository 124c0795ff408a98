"""
Task tracker OpenTelemetry setup

Production observability:
- Traces for store operations (one span per read-modify-write cycle)
- OTLP export when an endpoint is configured, in-process provider otherwise
"""
from __future__ import annotations
from typing import Optional
import logging
import os

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

SERVICE_NAME = "task-tracker"


def setup_otel(
    service_name: str = SERVICE_NAME,
    endpoint: Optional[str] = None,
):
    """Install a tracer provider, exporting via OTLP if an endpoint is set."""
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        # Already installed (app factory called more than once).
        return trace.get_tracer(service_name)

    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)

    otlp_endpoint = endpoint or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if otlp_endpoint:
        # Exporter ships in the optional "otlp" extra.
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(exporter))
        logger.info("Exporting traces to %s", otlp_endpoint)

    trace.set_tracer_provider(provider)
    return trace.get_tracer(service_name)


def get_tracer(name: str = SERVICE_NAME):
    """Tracer from the global provider (a no-op one until setup_otel runs)."""
    return trace.get_tracer(name)


def start_store_span(tracer, operation: str, **attributes):
    """Context manager span for a store operation."""
    return tracer.start_as_current_span(
        f"task_store.{operation}",
        attributes={f"task_store.{k}": v for k, v in attributes.items()},
    )
