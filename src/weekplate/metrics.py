"""Prometheus metrics definitions for Weekplate."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "weekplate_http_requests_total",
    "Total number of HTTP requests processed by the Weekplate API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "weekplate_http_request_duration_seconds",
    "Latency of HTTP requests processed by the Weekplate API",
    ["method", "path"],
)

FETCH_ATTEMPTS = Counter(
    "weekplate_fetch_attempts_total",
    "Individual attempts made against the generative backend by outcome",
    ["outcome"],
)

ARTIFACT_FETCHES = Counter(
    "weekplate_artifact_fetches_total",
    "Per-day image population results by status",
    ["status"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "FETCH_ATTEMPTS",
    "ARTIFACT_FETCHES",
]
