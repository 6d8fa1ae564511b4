"""Tests for request logging, metrics middleware and the metrics route."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.catalog.api.middleware.logging import (
    REQUEST_ID_HEADER,
    LoggingMiddleware,
    mask_secrets,
)
from src.catalog.core.monitoring import MetricsMiddleware, get_metrics_response, track_render


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(MetricsMiddleware)

    @app.get("/api/v1/workspaces/{workspace_id}")
    async def workspace(workspace_id: str):
        return {"id": workspace_id}

    @app.get("/metrics")
    async def metrics():
        return get_metrics_response()

    return app


@pytest.mark.asyncio
async def test_request_id_is_generated_and_echoed():
    transport = ASGITransport(app=_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/v1/workspaces/abc")

    assert response.status_code == 200
    assert response.headers[REQUEST_ID_HEADER]


@pytest.mark.asyncio
async def test_incoming_request_id_is_kept():
    transport = ASGITransport(app=_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get(
            "/api/v1/workspaces/abc", headers={REQUEST_ID_HEADER: "req-123"}
        )

    assert response.headers[REQUEST_ID_HEADER] == "req-123"


@pytest.mark.asyncio
async def test_metrics_use_route_pattern_not_ids():
    transport = ASGITransport(app=_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        await client.get("/api/v1/workspaces/some-unique-id")
        with track_render():
            pass
        response = await client.get("/metrics")

    body = response.text
    assert 'endpoint="/api/v1/workspaces/{workspace_id}"' in body
    assert "some-unique-id" not in body
    assert "catalog_render_duration_seconds_count" in body


def test_mask_secrets_hides_credentials():
    event = mask_secrets(
        None,
        "info",
        {"event": "x", "woocommerce_secret": "cs_live", "api_secret": "s", "company_name": "Acme"},
    )

    assert event["woocommerce_secret"] == "***"
    assert event["api_secret"] == "***"
    assert event["company_name"] == "Acme"
