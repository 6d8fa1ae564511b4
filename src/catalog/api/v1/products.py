"""REST API endpoints for the product catalog.

Lists synced products, triggers a WooCommerce sync and edits catalog
prices directly against the catalog store. Workspace-scoped variants of
these actions (with selection and optimistic updates) live in
workspaces.py.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from src.catalog.api.deps import get_product_store, get_sync_service
from src.catalog.products.store import CatalogStore
from src.catalog.products.sync import CatalogSyncService
from src.catalog.workspace.session import filter_products

router = APIRouter(prefix="/products", tags=["products"])


# ── Response Schemas ─────────────────────────────────────────────────────────


class ProductResponse(BaseModel):
    """Product row as shown in the catalog table."""

    id: str
    external_id: int
    name: str
    display_name: str
    display_description: str
    image_url: str | None = None
    category: str | None = None
    active: bool = True
    price: float
    catalog_price: float | None = None
    effective_price: float
    last_synced_at: str | None = None


class SyncResponse(BaseModel):
    written: int
    synced_at: str


# ── Request Schemas ──────────────────────────────────────────────────────────


class UpdateCatalogPriceRequest(BaseModel):
    """Request body for a catalog price edit; null clears the override."""

    catalog_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)


# ── Conversion Helpers ───────────────────────────────────────────────────────


def product_to_response(product: Any) -> ProductResponse:
    """Convert ProductRead to ProductResponse."""
    return ProductResponse(
        id=product.id,
        external_id=product.external_id,
        name=product.name,
        display_name=product.display_name,
        display_description=product.display_description,
        image_url=product.image_url,
        category=product.category,
        active=product.active,
        price=float(product.price),
        catalog_price=(
            float(product.catalog_price) if product.catalog_price is not None else None
        ),
        effective_price=float(product.effective_price),
        last_synced_at=(
            product.last_synced_at.isoformat() if product.last_synced_at else None
        ),
    )


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.get("", response_model=list[ProductResponse])
async def list_products(
    search: str = Query(default="", description="Filter by name, description or category"),
    store: CatalogStore = Depends(get_product_store),
) -> list[ProductResponse]:
    """List all products ordered by name."""
    products = await store.select_all()
    return [product_to_response(p) for p in filter_products(products, search)]


@router.post("/sync", response_model=SyncResponse)
async def sync_products(
    sync_service: CatalogSyncService = Depends(get_sync_service),
) -> SyncResponse:
    """Pull the WooCommerce catalog into the local store."""
    result = await sync_service.synchronize()
    return SyncResponse(written=result.written, synced_at=result.synced_at.isoformat())


@router.patch("/{product_id}/catalog-price", status_code=status.HTTP_204_NO_CONTENT)
async def update_catalog_price(
    product_id: str,
    body: UpdateCatalogPriceRequest,
    store: CatalogStore = Depends(get_product_store),
) -> Response:
    """Set or clear a product's catalog price."""
    await store.update_field(product_id, "catalog_price", body.catalog_price)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
