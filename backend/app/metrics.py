"""Prometheus metrics for monitoring.

Tracks request latency, stat lifecycle events, value churn and
document store failures.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram, Info

# Application info
APP_INFO = Info("statbook_app", "Statbook application info")

# HTTP metrics
HTTP_REQUESTS_TOTAL = Counter(
    "statbook_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "statbook_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Stat lifecycle
STATS_CREATED = Counter(
    "statbook_stats_created_total",
    "Stats created",
)

STATS_DELETED = Counter(
    "statbook_stats_deleted_total",
    "Stats deleted (only counts ids that existed)",
)

VALUES_ADDED = Counter(
    "statbook_stat_values_added_total",
    "Values appended to stats",
)

VALUES_REMOVED = Counter(
    "statbook_stat_values_removed_total",
    "Values removed from stats",
)

# Document store
STORE_ERRORS = Counter(
    "statbook_stat_store_errors_total",
    "Document store failures",
    ["operation"],
)

TRANSACTION_RETRIES = Counter(
    "statbook_stat_store_transaction_retries_total",
    "Optimistic transactions retried after a concurrent write",
    ["operation"],
)
