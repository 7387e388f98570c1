"""OpenTelemetry tracing configuration."""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
)
from opentelemetry.semconv.resource import ResourceAttributes

from provisioner.config import ObservabilitySettings


SERVICE_VERSION = "1.0.0"


def build_tracer_provider(settings: ObservabilitySettings) -> TracerProvider:
    """Tracer provider exporting to the console and/or an OTLP collector."""
    resource = Resource.create({
        ResourceAttributes.SERVICE_NAME: settings.service_name,
        ResourceAttributes.SERVICE_VERSION: SERVICE_VERSION,
    })
    provider = TracerProvider(resource=resource)

    if settings.console_traces:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    if settings.otlp_endpoint:
        # Installed with the "otlp" extra
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(exporter))

    return provider


def setup_tracing(settings: ObservabilitySettings) -> TracerProvider | None:
    """Install the global tracer provider when tracing is enabled."""
    if not settings.tracing_enabled:
        return None

    provider = build_tracer_provider(settings)
    trace.set_tracer_provider(provider)
    return provider


def get_tracer(name: str = "provisioner") -> trace.Tracer:
    """Get a tracer instance."""
    return trace.get_tracer(name)
