"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

GENERATION_CALLS = Counter(
    "genai_calls_total",
    "Calls issued to the generation service",
    ("capability", "outcome"),
)

GENERATION_LATENCY = Histogram(
    "genai_call_duration_seconds",
    "Generation service call duration in seconds",
    ("capability",),
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 90.0, 120.0),
)

PIPELINE_RUNS = Counter(
    "scenario_pipeline_runs_total",
    "Scenario pipeline runs by terminal outcome",
    ("outcome",),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def observe_generation(capability: str, outcome: str, duration_seconds: float) -> None:
    """Record one call to the generation service (text, speech or image)."""

    GENERATION_CALLS.labels(capability=capability, outcome=outcome).inc()
    GENERATION_LATENCY.labels(capability=capability).observe(max(0.0, duration_seconds))


def increment_pipeline_run(outcome: str) -> None:
    """Count a pipeline run that reached a terminal state."""

    PIPELINE_RUNS.labels(outcome=outcome).inc()
