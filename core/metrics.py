"""
Prometheus metrics for the access key service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Key lifecycle metrics
keys_generated_total = Counter(
    "keys_generated_total",
    "Total access keys generated",
    ["duration"],
)

keys_verified_total = Counter(
    "keys_verified_total",
    "Total key verifications",
    ["outcome"],
)

keys_renewed_total = Counter(
    "keys_renewed_total",
    "Total access keys renewed",
)

keys_purged_total = Counter(
    "keys_purged_total",
    "Total expired keys removed from the key document",
    ["trigger"],
)

# Document store metrics
store_conflicts_total = Counter(
    "store_conflicts_total",
    "Total revision conflicts when writing the key document",
    ["operation"],
)

store_request_duration_seconds = Histogram(
    "store_request_duration_seconds",
    "Document store request duration in seconds",
    ["method"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
