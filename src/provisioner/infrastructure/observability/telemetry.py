"""Workflow telemetry backed by Prometheus and OpenTelemetry."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from opentelemetry import trace

from provisioner.domain.ports.services import WorkflowTelemetry
from provisioner.infrastructure.observability.metrics import (
    CATALOG_REFRESHES_TOTAL,
    DESTROYS_TOTAL,
    ORDERS_TOTAL,
    POLL_ATTEMPTS_TOTAL,
    STAGE_DURATION,
    STAGE_OUTCOMES_TOTAL,
)
from provisioner.infrastructure.observability.tracing import get_tracer


class ObservabilityTelemetry(WorkflowTelemetry):
    """Counts into the process-wide Prometheus registry and opens one span per stage."""

    def __init__(self, tracer: trace.Tracer | None = None) -> None:
        self._tracer = tracer or get_tracer("provisioner.workflows")

    def poll_attempted(self, probe: str) -> None:
        POLL_ATTEMPTS_TOTAL.labels(probe=probe).inc()

    @contextmanager
    def stage_span(self, name: str, resource_ref: str) -> Iterator[None]:
        with self._tracer.start_as_current_span(name) as span:
            span.set_attribute("provisioner.resource", resource_ref)
            yield

    def stage_finished(self, workflow: str, stage: str, outcome: str, duration: float) -> None:
        STAGE_OUTCOMES_TOTAL.labels(workflow=workflow, stage=stage, outcome=outcome).inc()
        STAGE_DURATION.labels(workflow=workflow, stage=stage).observe(duration)
        trace.get_current_span().set_attribute("provisioner.outcome", outcome)

    def order_submitted(self, kind: str) -> None:
        ORDERS_TOTAL.labels(kind=kind).inc()

    def destroy_finished(self, kind: str, result: str) -> None:
        DESTROYS_TOTAL.labels(kind=kind, result=result).inc()

    def catalog_refreshed(self, result: str) -> None:
        CATALOG_REFRESHES_TOTAL.labels(result=result).inc()
