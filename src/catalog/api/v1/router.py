"""V1 API router -- aggregates all v1 endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.catalog.api.v1 import health, products, settings, workspaces

router = APIRouter()

router.include_router(health.router)
router.include_router(settings.router, prefix="/api/v1")
router.include_router(products.router, prefix="/api/v1")
router.include_router(workspaces.router, prefix="/api/v1")
