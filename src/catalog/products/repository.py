"""PostgreSQL-backed catalog store and settings provider.

ProductRepository and SettingsRepository use the session_factory callable
pattern: each method opens its own AsyncSession from the factory. Rows are
converted to Pydantic schemas before leaving the repository.

The product upsert is a single INSERT ... ON CONFLICT (woo_id) DO UPDATE
statement whose SET clause lists store-of-record columns only, so a merchant's
catalog_price is never touched by a sync.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable, Sequence
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import Insert, insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.catalog.products.errors import ProductNotFoundError
from src.catalog.products.models import CompanySettingsModel, ProductModel
from src.catalog.products.schemas import (
    CompanySettings,
    CompanySettingsUpdate,
    NormalizedProduct,
    ProductRead,
)
from src.catalog.products.store import USER_EDITABLE_FIELDS, CatalogStore, SettingsProvider

logger = structlog.get_logger(__name__)

_COUNTABLE_TABLES = {
    ProductModel.__tablename__: ProductModel,
    CompanySettingsModel.__tablename__: CompanySettingsModel,
}


# ── Serialization Helpers ───────────────────────────────────────────────────


def _model_to_product(model: ProductModel) -> ProductRead:
    """Convert ProductModel to ProductRead schema."""
    return ProductRead(
        id=str(model.id),
        external_id=model.woo_id,
        name=model.name,
        price=model.price,
        catalog_price=model.catalog_price,
        description=model.description,
        image_url=model.image_url,
        category=model.category,
        active=bool(model.is_active),
        last_synced_at=model.last_synced_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _model_to_settings(model: CompanySettingsModel) -> CompanySettings:
    """Convert CompanySettingsModel to CompanySettings schema."""
    return CompanySettings(
        id=str(model.id),
        company_name=model.company_name,
        logo_url=model.logo_url,
        contact_phone=model.contact_phone,
        contact_email=model.contact_email,
        woocommerce_url=model.woocommerce_url,
        woocommerce_key=model.woocommerce_key,
        woocommerce_secret=model.woocommerce_secret,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _product_to_row(product: NormalizedProduct, synced_at: datetime) -> dict[str, Any]:
    """Map a NormalizedProduct onto products table columns."""
    return {
        "woo_id": product.external_id,
        "name": product.name,
        "price": product.price,
        "description": product.description,
        "image_url": product.image_url,
        "category": product.category,
        "is_active": product.active,
        "last_synced_at": synced_at,
        "updated_at": synced_at,
    }


def build_upsert_statement(
    products: Sequence[NormalizedProduct], synced_at: datetime
) -> Insert:
    """Build the merge-not-replace upsert for a batch of products.

    Duplicate external ids within one batch are collapsed (last one wins),
    since PostgreSQL rejects a batch that hits the same conflict key twice.
    """
    rows_by_key: dict[int, dict[str, Any]] = {}
    for product in products:
        rows_by_key[product.external_id] = _product_to_row(product, synced_at)

    stmt = insert(ProductModel).values(list(rows_by_key.values()))
    return stmt.on_conflict_do_update(
        index_elements=[ProductModel.woo_id],
        set_={
            "name": stmt.excluded.name,
            "price": stmt.excluded.price,
            "description": stmt.excluded.description,
            "image_url": stmt.excluded.image_url,
            "category": stmt.excluded.category,
            "is_active": stmt.excluded.is_active,
            "last_synced_at": stmt.excluded.last_synced_at,
            "updated_at": stmt.excluded.updated_at,
        },
    )


# ── Products ────────────────────────────────────────────────────────────────


class ProductRepository(CatalogStore):
    """Async catalog store over the products table.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def upsert_by_key(
        self, products: Sequence[NormalizedProduct], synced_at: datetime
    ) -> int:
        """Insert new products and merge store-of-record fields into existing ones.

        The whole batch runs in one transaction: either every row is written
        or none is. Re-running after a failure converges because each row is
        keyed by woo_id.

        Returns:
            Number of distinct products written.
        """
        if not products:
            return 0

        stmt = build_upsert_statement(products, synced_at)
        written = len({p.external_id for p in products})
        async for session in self._session_factory():
            await session.execute(stmt)
            await session.commit()
            logger.info("products.upserted", count=written)
            return written
        return 0

    async def select_all(self) -> list[ProductRead]:
        """Return all products ordered by name."""
        async for session in self._session_factory():
            stmt = select(ProductModel).order_by(ProductModel.name, ProductModel.woo_id)
            result = await session.execute(stmt)
            return [_model_to_product(m) for m in result.scalars().all()]
        return []

    async def update_field(self, product_id: str, field: str, value: Any) -> None:
        """Update one user-editable field.

        Raises:
            ValueError: If field is not user-editable.
            ProductNotFoundError: If no product has this id.
        """
        if field not in USER_EDITABLE_FIELDS:
            raise ValueError(f"Field is not user-editable: {field}")
        try:
            key = uuid.UUID(product_id)
        except ValueError:
            raise ProductNotFoundError(product_id)

        async for session in self._session_factory():
            stmt = (
                update(ProductModel)
                .where(ProductModel.id == key)
                .values({field: value})
            )
            result = await session.execute(stmt)
            if result.rowcount == 0:
                await session.rollback()
                raise ProductNotFoundError(product_id)
            await session.commit()
            logger.info("products.field_updated", product_id=product_id, field=field)

    async def count_rows(self, table: str) -> int:
        """Return the row count of products or company_settings."""
        model = _COUNTABLE_TABLES.get(table)
        if model is None:
            raise ValueError(f"Unknown catalog table: {table}")
        async for session in self._session_factory():
            result = await session.execute(select(func.count()).select_from(model))
            return int(result.scalar_one())
        return 0


# ── Company Settings ────────────────────────────────────────────────────────


class SettingsRepository(SettingsProvider):
    """Reads and writes the singleton company_settings row.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def get_company_settings(self) -> CompanySettings | None:
        async for session in self._session_factory():
            stmt = select(CompanySettingsModel).order_by(CompanySettingsModel.created_at).limit(1)
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            return _model_to_settings(model) if model is not None else None
        return None

    async def count_settings(self) -> int:
        async for session in self._session_factory():
            result = await session.execute(
                select(func.count()).select_from(CompanySettingsModel)
            )
            return int(result.scalar_one())
        return 0

    async def save_company_settings(self, data: CompanySettingsUpdate) -> CompanySettings:
        """Update the existing row in place, or create it.

        Any stray extra rows are removed so the table keeps at most one row.
        """
        values = data.model_dump()
        async for session in self._session_factory():
            result = await session.execute(
                select(CompanySettingsModel).order_by(CompanySettingsModel.created_at)
            )
            rows = list(result.scalars().all())
            if rows:
                model = rows[0]
                for key, value in values.items():
                    setattr(model, key, value)
                if len(rows) > 1:
                    await session.execute(
                        delete(CompanySettingsModel).where(
                            CompanySettingsModel.id.in_([r.id for r in rows[1:]])
                        )
                    )
            else:
                model = CompanySettingsModel(**values)
                session.add(model)
            await session.commit()
            await session.refresh(model)
            logger.info("company_settings.saved", company_name=model.company_name)
            return _model_to_settings(model)
        raise RuntimeError("Session factory yielded no session")
