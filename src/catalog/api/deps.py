"""FastAPI dependencies resolving catalog services from app.state.

Services are built once in the application lifespan and stored on
app.state. A missing service answers 503 instead of failing the import,
so tests can mount routers on a bare app and set only what they need.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request, status

from src.catalog.products.repository import ProductRepository, SettingsRepository
from src.catalog.products.sync import CatalogSyncService
from src.catalog.workspace.registry import WorkspaceRegistry


def _from_state(request: Request, name: str, label: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} not initialized",
        )
    return service


def get_product_store(request: Request) -> ProductRepository:
    """Catalog store (ProductRepository in production)."""
    return _from_state(request, "product_store", "Catalog store")


def get_settings_provider(request: Request) -> SettingsRepository:
    """Company settings provider (SettingsRepository in production)."""
    return _from_state(request, "settings_provider", "Settings provider")


def get_sync_service(request: Request) -> CatalogSyncService:
    return _from_state(request, "sync_service", "Catalog sync")


def get_workspace_registry(request: Request) -> WorkspaceRegistry:
    return _from_state(request, "workspace_registry", "Workspace registry")
