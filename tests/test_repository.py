"""Tests for the PostgreSQL upsert statement and repository guards.

The upsert is inspected by compiling it against the PostgreSQL dialect;
no database connection is needed.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from sqlalchemy import UniqueConstraint
from sqlalchemy.dialects import postgresql

from src.catalog.products.errors import ProductNotFoundError
from src.catalog.products.models import ProductModel
from src.catalog.products.repository import ProductRepository, build_upsert_statement
from tests.doubles import make_product

SYNCED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _compile(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def _update_clause(sql: str) -> str:
    return sql.split("DO UPDATE SET", 1)[1]


def test_upsert_conflicts_on_woo_id():
    sql = _compile(build_upsert_statement([make_product(1)], SYNCED_AT))

    assert "INSERT INTO products" in sql
    assert "ON CONFLICT (woo_id) DO UPDATE SET" in sql


def test_upsert_never_overwrites_catalog_price():
    sql = _compile(build_upsert_statement([make_product(1)], SYNCED_AT))
    update_clause = _update_clause(sql)

    assert "catalog_price" not in sql
    for column in ("name", "price", "description", "image_url", "category", "is_active", "last_synced_at"):
        assert f"{column} = excluded.{column}" in update_clause


def test_upsert_collapses_duplicate_keys_last_wins():
    stmt = build_upsert_statement(
        [
            make_product(5, name="First"),
            make_product(6),
            make_product(5, name="Second", price=Decimal("3.00")),
        ],
        SYNCED_AT,
    )
    params = stmt.compile(dialect=postgresql.dialect()).params

    names = [value for key, value in params.items() if key.startswith("name")]
    assert sorted(names) == ["Product 6", "Second"]


@pytest.mark.asyncio
async def test_upsert_of_empty_batch_touches_nothing():
    session_factory = MagicMock()
    repo = ProductRepository(session_factory=session_factory)

    assert await repo.upsert_by_key([], SYNCED_AT) == 0
    session_factory.assert_not_called()


@pytest.mark.asyncio
async def test_update_field_rejects_store_of_record_fields():
    repo = ProductRepository(session_factory=MagicMock())

    with pytest.raises(ValueError):
        await repo.update_field("00000000-0000-0000-0000-000000000001", "price", Decimal("1"))


@pytest.mark.asyncio
async def test_update_field_unknown_id_is_not_found():
    repo = ProductRepository(session_factory=MagicMock())

    with pytest.raises(ProductNotFoundError):
        await repo.update_field("not-a-uuid", "catalog_price", Decimal("1"))


@pytest.mark.asyncio
async def test_count_rows_rejects_unknown_table():
    repo = ProductRepository(session_factory=MagicMock())

    with pytest.raises(ValueError):
        await repo.count_rows("pdf_history")


MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "001_catalog_tables.py"


def test_model_indexes_match_migration():
    table = ProductModel.__table__
    model_indexes = {index.name for index in table.indexes}
    model_uniques = {
        constraint.name
        for constraint in table.constraints
        if isinstance(constraint, UniqueConstraint)
    }
    source = MIGRATION.read_text(encoding="utf-8")
    migration_indexes = set(re.findall(r'op\.create_index\(\s*"(\w+)",\s*"products"', source))
    migration_uniques = set(
        re.findall(r'UniqueConstraint\(\s*"woo_id",\s*name="(\w+)"\)', source)
    )

    assert model_indexes == migration_indexes == {"ix_products_name"}
    assert model_uniques == migration_uniques == {"uq_products_woo_id"}
    assert not table.c.woo_id.index
