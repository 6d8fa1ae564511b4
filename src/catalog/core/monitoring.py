"""Prometheus metrics for HTTP traffic, catalog sync and PDF export.

Provides:
- MetricsMiddleware: ASGI middleware for HTTP request metrics
- catalog_sync_total / catalog_products_synced_total: sync outcome counters
- track_render(): Context manager timing PDF renders
- get_metrics_response(): Response body for the /metrics route
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import REGISTRY, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ── HTTP Metrics ─────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Catalog Metrics ──────────────────────────────────────────────────────────

catalog_sync_total = Counter(
    "catalog_sync_total",
    "Catalog sync attempts by outcome",
    ["status"],
)

catalog_products_synced_total = Counter(
    "catalog_products_synced_total",
    "Products written by catalog syncs",
)

catalog_render_duration_seconds = Histogram(
    "catalog_render_duration_seconds",
    "PDF catalog render duration in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)


# ── Metrics Middleware ───────────────────────────────────────────────────────


class MetricsMiddleware(BaseHTTPMiddleware):
    """ASGI middleware that records Prometheus metrics for every HTTP request.

    Skips the /metrics endpoint itself to avoid self-referential counting.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        # Route pattern keeps workspace/product ids out of label values
        route = request.scope.get("route")
        endpoint = getattr(route, "path", None) or request.url.path

        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=str(response.status_code),
        ).inc()

        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)

        return response


# ── Render Timing ────────────────────────────────────────────────────────────


@contextmanager
def track_render() -> Iterator[None]:
    """Observe the wall time of a PDF render."""
    start_time = time.perf_counter()
    try:
        yield
    finally:
        catalog_render_duration_seconds.observe(time.perf_counter() - start_time)


# ── Metrics Endpoint ─────────────────────────────────────────────────────────


def get_metrics_response() -> Response:
    """Generate Prometheus exposition format response."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
