"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    GENERATION_CALLS,
    GENERATION_LATENCY,
    PIPELINE_RUNS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    increment_pipeline_run,
    observe_generation,
    observe_request,
)

__all__ = [
    "ERROR_COUNTER",
    "GENERATION_CALLS",
    "GENERATION_LATENCY",
    "PIPELINE_RUNS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "increment_pipeline_run",
    "observe_generation",
    "observe_request",
]
