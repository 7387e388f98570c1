"""Prometheus metrics configuration."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
)


# Application info
APP_INFO = Info("provisioner", "Compute provisioner application info")
APP_INFO.info({
    "version": "1.0.0",
    "service": "compute-provisioner",
})

# Order metrics
ORDERS_TOTAL = Counter(
    "provisioner_orders_total",
    "Total number of submitted orders",
    ["kind"],
)

# Workflow metrics
STAGE_OUTCOMES_TOTAL = Counter(
    "provisioner_stage_outcomes_total",
    "Outcome of each bounded wait of a workflow",
    ["workflow", "stage", "outcome"],  # outcome: passed/timed_out/failed
)

STAGE_DURATION = Histogram(
    "provisioner_stage_duration_seconds",
    "Time spent waiting in a workflow stage",
    ["workflow", "stage"],
    buckets=[1, 10, 60, 300, 900, 1800, 3600, 4 * 3600, 10 * 3600],
)

POLL_ATTEMPTS_TOTAL = Counter(
    "provisioner_poll_attempts_total",
    "Total number of probe evaluations",
    ["probe"],
)

DESTROYS_TOTAL = Counter(
    "provisioner_destroys_total",
    "Total number of destroy requests",
    ["kind", "result"],  # result: destroyed/absent/not_billable/refused/timed_out
)

# Catalog metrics
CATALOG_REFRESHES_TOTAL = Counter(
    "provisioner_catalog_refreshes_total",
    "Total catalog refreshes",
    ["result"],  # success/unavailable/unauthorized
)


def start_metrics_server(enabled: bool, port: int) -> bool:
    """Expose the default registry over HTTP; port 0 keeps it unexposed."""
    if not enabled or port == 0:
        return False
    start_http_server(port)
    return True
