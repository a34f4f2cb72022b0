"""Prometheus metrics for the fraud-detection transaction service.

Business Metrics:
- fraud_transactions_created_total: Transactions recorded, by type
- fraud_transactions_flagged_total: Fraud flags raised, by risk band
- fraud_transactions_cleared_total: Fraud flags cleared
- fraud_status_changes_total: Status updates, by target status

Technical Metrics:
- fraud_validation_failures_total: Rejected writes, by field
- fraud_lookup_misses_total: Lookups that found nothing, by key
- fraud_http_requests_total / fraud_http_request_latency_seconds
"""

import time
from contextlib import contextmanager
from typing import Generator, Iterable

from prometheus_client import Counter, Histogram, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from fraud_detection.core.config import settings


# =============================================================================
# Business Metrics
# =============================================================================

transactions_created = Counter(
    "fraud_transactions_created_total",
    "Total number of transactions recorded",
    ["type"],
)

transactions_flagged = Counter(
    "fraud_transactions_flagged_total",
    "Total number of transactions flagged as potential fraud",
    ["risk"],  # high, normal
)

transactions_cleared = Counter(
    "fraud_transactions_cleared_total",
    "Total number of fraud flags cleared",
)

status_changes = Counter(
    "fraud_status_changes_total",
    "Total number of transaction status updates",
    ["status"],
)


# =============================================================================
# Technical Metrics
# =============================================================================

validation_failures = Counter(
    "fraud_validation_failures_total",
    "Total number of rejected transaction writes",
    ["field"],
)

lookup_misses = Counter(
    "fraud_lookup_misses_total",
    "Total number of transaction lookups that found nothing",
    ["key"],
)

service_latency = Histogram(
    "fraud_service_latency_seconds",
    "Transaction use-case latency in seconds",
    ["operation"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

http_requests_total = Counter(
    "fraud_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "fraud_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_transaction_created(transaction_type: str) -> None:
    """Record a newly persisted transaction."""
    if settings.metrics_enabled:
        transactions_created.labels(type=transaction_type).inc()


def record_transaction_flagged(high_risk: bool) -> None:
    """Record a fraud flag."""
    if settings.metrics_enabled:
        transactions_flagged.labels(risk="high" if high_risk else "normal").inc()


def record_transaction_cleared() -> None:
    """Record a cleared fraud flag."""
    if settings.metrics_enabled:
        transactions_cleared.inc()


def record_status_change(status: str) -> None:
    """Record a status update."""
    if settings.metrics_enabled:
        status_changes.labels(status=status).inc()


def record_validation_failure(fields: Iterable[str]) -> None:
    """Record one rejected write per offending field."""
    if not settings.metrics_enabled:
        return
    for field in set(fields) or {"unknown"}:
        validation_failures.labels(field=field).inc()


def record_lookup_miss(key: str) -> None:
    """Record a lookup that found no transaction."""
    if settings.metrics_enabled:
        lookup_misses.labels(key=key).inc()


def record_http_request(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    if settings.metrics_enabled:
        http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        http_request_latency.labels(method=method, endpoint=endpoint).observe(duration)


@contextmanager
def track_latency(operation: str) -> Generator[None, None, None]:
    """Context manager to track a use-case's latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        if settings.metrics_enabled:
            service_latency.labels(operation=operation).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
