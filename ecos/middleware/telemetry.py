"""Telemetry middleware for request instrumentation."""

from __future__ import annotations

import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ecos.telemetry import observe_request


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Collect request metrics for Prometheus."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            observe_request(
                request.method,
                self._resolve_route(request),
                status_code,
                time.perf_counter() - start_time,
            )
        return response

    @staticmethod
    def _resolve_route(request: Request) -> str:
        """Prefer the route template so metric labels stay low-cardinality."""

        scope_route: Any = request.scope.get("route")
        path = getattr(scope_route, "path", None) if scope_route is not None else None
        return path or request.url.path
