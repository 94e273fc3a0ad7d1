"""Prometheus metrics for hosting-service traffic.

Registered on the default prometheus_client registry; the embedding
application decides whether and where to expose them. Alert rules worth
configuring:
- hosting_requests_total{outcome="fatal"} (rejected requests, schema drift)
- hosting_retries_total (service instability, rate limiting)
"""

from prometheus_client import Counter, Histogram

# === Request Metrics ===

hosting_requests_total = Counter(
    "hosting_requests_total",
    "Total hosting-service requests by operation and classified outcome",
    ["operation", "outcome"],
)
"""
Request attempts counter.

Labels:
- operation: announce_release, fetch_release, list_releases, fetch_package
- outcome: success, retryable, fatal
"""

hosting_retries_total = Counter(
    "hosting_retries_total",
    "Total retries scheduled by operation and failure reason",
    ["operation", "reason"],
)
"""
Retries counter.

Labels:
- operation: see hosting_requests_total
- reason: timeout, connection, rate_limited, server_error
"""

# === Latency Metrics ===

hosting_request_latency_seconds = Histogram(
    "hosting_request_latency_seconds",
    "Latency of a single hosting-service HTTP attempt",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)
