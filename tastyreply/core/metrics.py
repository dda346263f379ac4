"""Prometheus metrics for monitoring."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# HTTP Request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method", "endpoint"],
)

http_requests_rate_limited_total = Counter(
    "http_requests_rate_limited_total",
    "Requests rejected by the global rate limit",
)

# External API metrics
external_api_requests_total = Counter(
    "external_api_requests_total",
    "Total external API requests",
    ["service", "endpoint", "status"],  # service: openai, google
)

external_api_duration_seconds = Histogram(
    "external_api_duration_seconds",
    "External API request duration",
    ["service", "endpoint"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Business metrics
replies_generated_total = Counter(
    "replies_generated_total",
    "Reply candidates generated",
    ["tone", "source"],  # source: ai, fallback
)

reviews_ingested_total = Counter(
    "reviews_ingested_total",
    "Reviews ingested into the store",
    ["platform", "outcome"],  # outcome: inserted, updated
)

replies_attached_total = Counter(
    "replies_attached_total",
    "Replies attached to reviews",
    ["platform"],
)

# System metrics
app_uptime_seconds = Gauge(
    "app_uptime_seconds",
    "Application uptime in seconds",
)

app_info = Gauge(
    "app_info",
    "Application info",
    ["version", "environment", "store_backend"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors by type",
    ["error_type", "component"],
)
