"""
Prometheus metrics registration and helpers.

Exports:
- observe_request(...): HTTP request count and latency per endpoint
- observe_notification(...): one delivered notification per channel
- observe_design_review(...): one admin design review per outcome
- observe_inventory_import(...): CSV import size per inventory kind
- metrics_latest(): text exposition from the right registry (multiprocess-aware)
- CONTENT_TYPE_LATEST: Prometheus content type
"""

import os
from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess


REQUEST_COUNTER = Counter(
    'bd_http_requests_total', 'Total HTTP requests', ['endpoint', 'status']
)

REQUEST_LATENCY = Histogram(
    'bd_http_request_latency_seconds', 'HTTP request latency seconds', ['endpoint']
)

NOTIFICATIONS = Counter(
    'bd_notifications_total', 'Notifications delivered', ['channel']
)

DESIGN_REVIEWS = Counter(
    'bd_design_reviews_total', 'Design reviews by outcome', ['outcome']
)

INVENTORY_IMPORT_ROWS = Histogram(
    'bd_inventory_import_rows', 'Rows per inventory CSV import', ['kind'],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500],
)


def observe_request(endpoint: str, status: int, latency_seconds: float) -> None:
    REQUEST_COUNTER.labels(endpoint=endpoint, status=str(status)).inc()
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency_seconds)


def observe_notification(channel: str) -> None:
    NOTIFICATIONS.labels(channel=channel).inc()


def observe_design_review(outcome: str) -> None:
    DESIGN_REVIEWS.labels(outcome=outcome).inc()


def observe_inventory_import(kind: str, rows: int) -> None:
    INVENTORY_IMPORT_ROWS.labels(kind=kind).observe(rows)


def metrics_latest() -> bytes:
    """Text exposition; PROMETHEUS_MULTIPROC_DIR switches to the multiprocess collector."""
    if os.getenv('PROMETHEUS_MULTIPROC_DIR'):
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return generate_latest(registry)
    return generate_latest()


__all__ = [
    'observe_request', 'observe_notification', 'observe_design_review',
    'observe_inventory_import', 'metrics_latest', 'CONTENT_TYPE_LATEST',
]
