"""Pydantic schemas for the product catalog pipeline.

Defines all structured types flowing between the WooCommerce client, the
sync service, the catalog store, the workspace and the PDF renderer:
- Remote side: RemoteCredentials, NormalizedProduct
- Store side: ProductRead, CompanySettings, CompanySettingsUpdate
- Export side: CatalogItem, CompanyInfo
- Sync outcome: SyncResult
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.catalog.products.sanitize import product_title, strip_markup

FALLBACK_PRODUCT_NAME = "Sem nome"


# ── Remote Catalog ──────────────────────────────────────────────────────────


class RemoteCredentials(BaseModel):
    """Connection details for the WooCommerce REST API, resolved at call time."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    api_key: str
    api_secret: str = Field(repr=False)


class NormalizedProduct(BaseModel):
    """Canonical, store-agnostic product built from one remote record.

    Only carries store-of-record fields; catalog_price is local-only and
    never comes from the remote store.
    """

    model_config = ConfigDict(frozen=True)

    external_id: int
    name: str
    price: Decimal = Decimal("0")
    description: str | None = None
    image_url: str | None = None
    category: str | None = None
    active: bool = False


# ── Catalog Store ───────────────────────────────────────────────────────────


class ProductRead(BaseModel):
    """A persisted product row.

    effective_price is what the exported catalog shows: the locally curated
    catalog_price when set, otherwise the store-of-record price.
    """

    id: str
    external_id: int
    name: str
    price: Decimal
    catalog_price: Decimal | None = None
    description: str | None = None
    image_url: str | None = None
    category: str | None = None
    active: bool = True
    last_synced_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def effective_price(self) -> Decimal:
        return self.catalog_price if self.catalog_price is not None else self.price

    @property
    def display_description(self) -> str:
        return strip_markup(self.description)

    @property
    def display_name(self) -> str:
        """Product title for listings and the exported catalog."""
        name = strip_markup(self.name)
        if name:
            return name
        return product_title(self.description) or FALLBACK_PRODUCT_NAME


class CompanySettings(BaseModel):
    """The singleton company_settings row: branding plus store credentials."""

    id: str | None = None
    company_name: str
    logo_url: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    woocommerce_url: str
    woocommerce_key: str
    woocommerce_secret: str = Field(repr=False)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_credentials(self) -> RemoteCredentials:
        return RemoteCredentials(
            base_url=self.woocommerce_url,
            api_key=self.woocommerce_key,
            api_secret=self.woocommerce_secret,
        )

    def to_company_info(self) -> CompanyInfo:
        return CompanyInfo(
            company_name=self.company_name,
            logo_url=self.logo_url or None,
            contact_phone=self.contact_phone or None,
            contact_email=self.contact_email or None,
        )


class CompanySettingsUpdate(BaseModel):
    """Payload written by the settings form."""

    company_name: str = Field(min_length=1)
    logo_url: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    woocommerce_url: str = Field(min_length=1)
    woocommerce_key: str = Field(min_length=1)
    woocommerce_secret: str = Field(min_length=1, repr=False)


# ── Export ──────────────────────────────────────────────────────────────────


class CatalogItem(BaseModel):
    """One row of the exported PDF table."""

    model_config = ConfigDict(frozen=True)

    name: str
    price: Decimal
    category: str | None = None


class CompanyInfo(BaseModel):
    """Branding metadata printed in the PDF header and footer."""

    model_config = ConfigDict(frozen=True)

    company_name: str
    logo_url: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None


# ── Sync ────────────────────────────────────────────────────────────────────


class SyncResult(BaseModel):
    """Summary of one synchronize() run."""

    written: int = 0
    synced_at: datetime
