"""
Monitoring for hosting-service traffic (Prometheus metrics).
"""

from release_hosting.monitoring.metrics import (
    hosting_request_latency_seconds,
    hosting_requests_total,
    hosting_retries_total,
)

__all__ = [
    "hosting_requests_total",
    "hosting_retries_total",
    "hosting_request_latency_seconds",
]
