"""REST API endpoints for the company settings row.

The settings form itself is a separate frontend; these endpoints only
read and write the singleton row and report whether it exists.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from src.catalog.api.deps import get_settings_provider
from src.catalog.products.schemas import CompanySettingsUpdate
from src.catalog.products.store import SettingsProvider

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsStatusResponse(BaseModel):
    configured: bool


class CompanySettingsResponse(BaseModel):
    """Settings as returned to the form; the API secret is never echoed."""

    company_name: str
    logo_url: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    woocommerce_url: str
    woocommerce_key: str
    has_secret: bool = False
    updated_at: str | None = None


def _settings_to_response(settings: Any) -> CompanySettingsResponse:
    return CompanySettingsResponse(
        company_name=settings.company_name,
        logo_url=settings.logo_url,
        contact_phone=settings.contact_phone,
        contact_email=settings.contact_email,
        woocommerce_url=settings.woocommerce_url,
        woocommerce_key=settings.woocommerce_key,
        has_secret=bool(settings.woocommerce_secret),
        updated_at=settings.updated_at.isoformat() if settings.updated_at else None,
    )


@router.get("/status", response_model=SettingsStatusResponse)
async def settings_status(
    provider: SettingsProvider = Depends(get_settings_provider),
) -> SettingsStatusResponse:
    """Whether exactly one settings row exists (sync is blocked otherwise)."""
    return SettingsStatusResponse(configured=await provider.has_settings())


@router.get("", response_model=CompanySettingsResponse)
async def get_company_settings(
    provider: SettingsProvider = Depends(get_settings_provider),
) -> CompanySettingsResponse:
    settings = await provider.get_company_settings()
    if settings is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Company settings not configured",
        )
    return _settings_to_response(settings)


@router.put("", response_model=CompanySettingsResponse)
async def save_company_settings(
    body: CompanySettingsUpdate,
    provider: SettingsProvider = Depends(get_settings_provider),
) -> CompanySettingsResponse:
    """Create or replace the company settings row."""
    settings = await provider.save_company_settings(body)
    return _settings_to_response(settings)
