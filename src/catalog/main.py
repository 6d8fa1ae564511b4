"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, the
catalog error handlers, lifespan wiring of the catalog services, and the
v1 API router.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import Response

from src.catalog.config import get_settings
from src.catalog.core.database import close_db, get_session
from src.catalog.core.monitoring import MetricsMiddleware, get_metrics_response
from src.catalog.api.errors import register_error_handlers
from src.catalog.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.catalog.api.v1.router import router as v1_router
from src.catalog.documents.renderer import render_catalog
from src.catalog.products.repository import ProductRepository, SettingsRepository
from src.catalog.products.sync import CatalogSyncService
from src.catalog.products.woocommerce import WooCommerceClient
from src.catalog.workspace.registry import WorkspaceRegistry
from src.catalog.workspace.session import CatalogWorkspace


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: wire catalog services on startup, close on shutdown."""
    log = structlog.get_logger(__name__)
    settings = get_settings()
    configure_structlog()

    product_store = ProductRepository(session_factory=get_session)
    settings_provider = SettingsRepository(session_factory=get_session)
    client = WooCommerceClient(
        page_size=settings.WOOCOMMERCE_PAGE_SIZE,
        timeout=settings.WOOCOMMERCE_TIMEOUT,
    )
    sync_service = CatalogSyncService(
        settings_provider=settings_provider,
        store=product_store,
        client=client,
    )

    def new_workspace() -> CatalogWorkspace:
        return CatalogWorkspace(
            store=product_store,
            settings_provider=settings_provider,
            sync_service=sync_service,
            renderer=render_catalog,
            currency_prefix=settings.CATALOG_CURRENCY_PREFIX,
        )

    app.state.product_store = product_store
    app.state.settings_provider = settings_provider
    app.state.sync_service = sync_service
    app.state.workspace_registry = WorkspaceRegistry(
        factory=new_workspace, idle_ttl=settings.WORKSPACE_IDLE_TTL
    )
    log.info("catalog.services_initialized", environment=settings.ENVIRONMENT.value)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    app.state.workspace_registry.close_all()
    await close_db()
    log.info("catalog.shutdown_complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Product Catalog API",
        version="0.1.0",
        description="WooCommerce catalog sync, curated pricing and PDF catalog export",
        lifespan=lifespan,
    )

    # Middleware is added in reverse order (last added = outermost)

    # CORS middleware
    if settings.CORS_ALLOWED_ORIGINS == "*":
        origins = ["*"]
    else:
        origins = [o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    register_error_handlers(app)

    app.include_router(v1_router)

    # Prometheus metrics endpoint (infrastructure route, outside v1 router)
    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
