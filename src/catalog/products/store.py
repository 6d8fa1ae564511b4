"""Catalog store and settings provider interfaces.

The sync service and workspaces only see these ABCs. ProductRepository and
SettingsRepository (repository.py) implement them over PostgreSQL; tests
use in-memory doubles.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from src.catalog.products.schemas import (
    CompanySettings,
    CompanySettingsUpdate,
    NormalizedProduct,
    ProductRead,
)

# Columns a sync may overwrite. Never includes catalog_price.
STORE_OF_RECORD_FIELDS = (
    "name",
    "price",
    "description",
    "image_url",
    "category",
    "active",
    "last_synced_at",
)

# Columns a user may edit through update_field().
USER_EDITABLE_FIELDS = ("catalog_price",)


class CatalogStore(ABC):
    """Persisted table of canonical products keyed by external_id.

    Methods:
        upsert_by_key: Insert-or-merge products keyed by external_id.
        select_all: All products ordered by name.
        update_field: Set one user-editable field on one product.
        count_rows: Row count of a catalog table.
    """

    @abstractmethod
    async def upsert_by_key(
        self, products: Sequence[NormalizedProduct], synced_at: datetime
    ) -> int:
        """Merge store-of-record fields by external_id, return rows written."""
        ...

    @abstractmethod
    async def select_all(self) -> list[ProductRead]:
        """Return every product ordered by name."""
        ...

    @abstractmethod
    async def update_field(self, product_id: str, field: str, value: Any) -> None:
        """Update a single user-editable field of one product."""
        ...

    @abstractmethod
    async def count_rows(self, table: str) -> int:
        """Return the number of rows in a catalog table."""
        ...


class SettingsProvider(ABC):
    """Source of the singleton company settings row."""

    @abstractmethod
    async def get_company_settings(self) -> CompanySettings | None:
        """Return the settings row, or None when not configured yet."""
        ...

    @abstractmethod
    async def save_company_settings(self, data: CompanySettingsUpdate) -> CompanySettings:
        """Create or replace the singleton settings row."""
        ...

    async def has_settings(self) -> bool:
        """True when exactly one settings row exists."""
        return await self.count_settings() == 1

    @abstractmethod
    async def count_settings(self) -> int:
        """Return the number of settings rows (0 or 1)."""
        ...
