"""Create company settings and product catalog tables.

Revision ID: 001_catalog_tables
Revises:
Create Date: 2026-10-17

Creates two tables:
- company_settings: branding and WooCommerce credentials (zero or one row)
- products: synced products keyed by the unique WooCommerce id, plus the
  locally curated catalog_price

Both tables get RLS policies granting full access to the `authenticated`
role when that role exists (hosted Postgres setups); on a plain database
the policies are skipped and access is governed by ordinary grants.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = "001_catalog_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _authenticated_policy(table: str, name: str, command: str) -> None:
    op.execute(f"""
        DO $$
        BEGIN
            IF EXISTS (SELECT 1 FROM pg_roles WHERE rolname = 'authenticated') THEN
                CREATE POLICY "{name}" ON {table}
                FOR {command}
                TO authenticated
                USING (true);
            END IF;
        END
        $$
    """)


def upgrade() -> None:
    # ── company_settings table ──────────────────────────────────────────

    op.create_table(
        "company_settings",
        sa.Column(
            "id",
            UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("company_name", sa.Text(), nullable=False),
        sa.Column("logo_url", sa.Text(), nullable=True),
        sa.Column("contact_phone", sa.Text(), nullable=True),
        sa.Column("contact_email", sa.Text(), nullable=True),
        sa.Column("woocommerce_url", sa.Text(), nullable=False),
        sa.Column("woocommerce_key", sa.Text(), nullable=False),
        sa.Column("woocommerce_secret", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
    )

    op.execute("ALTER TABLE company_settings ENABLE ROW LEVEL SECURITY")
    _authenticated_policy(
        "company_settings", "Allow full access to authenticated users", "ALL"
    )

    # ── products table ──────────────────────────────────────────────────

    op.create_table(
        "products",
        sa.Column(
            "id",
            UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("woo_id", sa.BigInteger(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("catalog_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(2048), nullable=True),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column(
            "is_active",
            sa.Boolean(),
            server_default=sa.text("true"),
            nullable=False,
        ),
        sa.Column(
            "last_synced_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.UniqueConstraint("woo_id", name="uq_products_woo_id"),
    )
    op.create_index("ix_products_name", "products", ["name"])

    op.execute("ALTER TABLE products ENABLE ROW LEVEL SECURITY")
    _authenticated_policy(
        "products", "Allow read access to authenticated users", "SELECT"
    )
    _authenticated_policy(
        "products", "Allow write access to authenticated users", "ALL"
    )


def downgrade() -> None:
    op.drop_index("ix_products_name", table_name="products")
    op.drop_table("products")
    op.drop_table("company_settings")
