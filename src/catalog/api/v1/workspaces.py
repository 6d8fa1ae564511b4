"""REST API endpoints for catalog workspaces.

A workspace is the server-side state of one open catalog page: the loaded
product list, the selection, optimistic price edits and the error banner.
The frontend creates one on page load and deletes it on unload; any
results that land after deletion are discarded by the workspace itself.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel

from src.catalog.api.deps import get_workspace_registry
from src.catalog.api.v1.products import (
    ProductResponse,
    SyncResponse,
    UpdateCatalogPriceRequest,
    product_to_response,
)
from src.catalog.config import get_settings
from src.catalog.documents.renderer import CATALOG_MEDIA_TYPE
from src.catalog.products.errors import CatalogError
from src.catalog.workspace.navigation import NavigationIntent
from src.catalog.workspace.registry import WorkspaceRegistry
from src.catalog.workspace.session import CatalogWorkspace

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


# ── Response Schemas ─────────────────────────────────────────────────────────


class WorkspaceResponse(BaseModel):
    """Snapshot of a workspace's page state."""

    id: str
    view: str
    error: str | None = None
    is_syncing: bool = False
    product_count: int = 0
    selected: list[str] = []


class WorkspaceProductsResponse(BaseModel):
    products: list[ProductResponse]
    selected: list[str]
    error: str | None = None


class SelectionResponse(BaseModel):
    product_id: str
    selected: bool
    selected_count: int


# ── Request Schemas ──────────────────────────────────────────────────────────


class NavigateRequest(BaseModel):
    intent: NavigationIntent


# ── Conversion Helpers ───────────────────────────────────────────────────────


def _workspace_to_response(workspace: CatalogWorkspace) -> WorkspaceResponse:
    return WorkspaceResponse(
        id=workspace.id,
        view=workspace.view.current.value,
        error=workspace.error,
        is_syncing=workspace.is_syncing,
        product_count=len(workspace.products),
        selected=list(workspace.selection),
    )


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.post("", response_model=WorkspaceResponse, status_code=status.HTTP_201_CREATED)
async def create_workspace(
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> WorkspaceResponse:
    """Open a workspace and load the product list into it.

    A failed load does not prevent creation; the banner carries the message.
    """
    workspace = registry.create()
    try:
        await workspace.load()
    except CatalogError as exc:
        logger.warning("workspace.initial_load_failed", workspace_id=workspace.id, error=str(exc))
    return _workspace_to_response(workspace)


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
async def get_workspace(
    workspace_id: str,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> WorkspaceResponse:
    return _workspace_to_response(registry.get(workspace_id))


@router.delete("/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_workspace(
    workspace_id: str,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> Response:
    registry.close(workspace_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{workspace_id}/navigate", response_model=WorkspaceResponse)
async def navigate_workspace(
    workspace_id: str,
    body: NavigateRequest,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> WorkspaceResponse:
    """Move between the catalog and settings views."""
    workspace = registry.get(workspace_id)
    workspace.navigate(body.intent)
    return _workspace_to_response(workspace)


@router.get("/{workspace_id}/products", response_model=WorkspaceProductsResponse)
async def list_workspace_products(
    workspace_id: str,
    search: str = Query(default=""),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> WorkspaceProductsResponse:
    """Products visible under the search text, with the current selection."""
    workspace = registry.get(workspace_id)
    return WorkspaceProductsResponse(
        products=[product_to_response(p) for p in workspace.visible_products(search)],
        selected=list(workspace.selection),
        error=workspace.error,
    )


@router.post("/{workspace_id}/selection/{product_id}", response_model=SelectionResponse)
async def toggle_selection(
    workspace_id: str,
    product_id: str,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> SelectionResponse:
    workspace = registry.get(workspace_id)
    selected = workspace.toggle(product_id)
    return SelectionResponse(
        product_id=product_id,
        selected=selected,
        selected_count=len(workspace.selection),
    )


@router.patch(
    "/{workspace_id}/products/{product_id}/catalog-price",
    response_model=ProductResponse,
)
async def update_workspace_catalog_price(
    workspace_id: str,
    product_id: str,
    body: UpdateCatalogPriceRequest,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> ProductResponse:
    """Optimistically set a catalog price; rolled back if the write fails."""
    workspace = registry.get(workspace_id)
    product = await workspace.update_catalog_price(product_id, body.catalog_price)
    return product_to_response(product)


@router.post("/{workspace_id}/sync", response_model=SyncResponse)
async def sync_workspace(
    workspace_id: str,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> SyncResponse:
    workspace = registry.get(workspace_id)
    result = await workspace.synchronize()
    return SyncResponse(written=result.written, synced_at=result.synced_at.isoformat())


@router.post("/{workspace_id}/export")
async def export_workspace_pdf(
    workspace_id: str,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> Response:
    """Download the selected products as the branded PDF catalog."""
    workspace = registry.get(workspace_id)
    pdf_bytes = await workspace.export_pdf()
    filename = get_settings().CATALOG_PDF_FILENAME
    return Response(
        content=pdf_bytes,
        media_type=CATALOG_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{workspace_id}/share", status_code=status.HTTP_501_NOT_IMPLEMENTED)
async def share_workspace_selection(
    workspace_id: str,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> Response:
    workspace = registry.get(workspace_id)
    try:
        workspace.share_selection()
    except NotImplementedError as exc:
        return Response(
            content=str(exc),
            media_type="text/plain; charset=utf-8",
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
