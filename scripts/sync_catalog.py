#!/usr/bin/env python3
"""CLI script to sync the WooCommerce catalog and optionally export a PDF.

Usage:
    uv run python scripts/sync_catalog.py
    uv run python scripts/sync_catalog.py --export catalogo-produtos.pdf
    uv run python scripts/sync_catalog.py --skip-sync --export out.pdf --category Tools

Connects directly to the database using DATABASE_URL from environment or .env file.
Credentials come from the company_settings row, exactly as for the API.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.catalog
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def run(skip_sync: bool, export_path: str | None, category: str | None) -> int:
    """Sync the catalog, then export every (or one category's) product."""
    from src.catalog.api.middleware.logging import configure_structlog
    from src.catalog.config import get_settings
    from src.catalog.core.database import close_db, get_session
    from src.catalog.documents.renderer import render_catalog
    from src.catalog.products.errors import CatalogError
    from src.catalog.products.repository import ProductRepository, SettingsRepository
    from src.catalog.products.schemas import CatalogItem
    from src.catalog.products.sync import CatalogSyncService
    from src.catalog.products.woocommerce import WooCommerceClient

    configure_structlog()
    settings = get_settings()
    store = ProductRepository(session_factory=get_session)
    provider = SettingsRepository(session_factory=get_session)

    try:
        if not skip_sync:
            service = CatalogSyncService(
                settings_provider=provider,
                store=store,
                client=WooCommerceClient(
                    page_size=settings.WOOCOMMERCE_PAGE_SIZE,
                    timeout=settings.WOOCOMMERCE_TIMEOUT,
                ),
            )
            try:
                result = await service.synchronize()
            except CatalogError as exc:
                print(f"Sync failed: {exc.user_message}", file=sys.stderr)
                return 1
            print(f"Synced {result.written} products at {result.synced_at.isoformat()}")

        if export_path:
            company = await provider.get_company_settings()
            if company is None:
                print("Company settings not configured; cannot export.", file=sys.stderr)
                return 1
            products = await store.select_all()
            if category:
                products = [p for p in products if (p.category or "") == category]
            if not products:
                print("No products to export.", file=sys.stderr)
                return 1
            items = [
                CatalogItem(name=p.display_name, price=p.effective_price, category=p.category)
                for p in products
            ]
            pdf_bytes = render_catalog(
                items,
                company.to_company_info(),
                currency_prefix=settings.CATALOG_CURRENCY_PREFIX,
            )
            with open(export_path, "wb") as fh:
                fh.write(pdf_bytes)
            print(f"Exported {len(items)} products to {export_path}")
    finally:
        await close_db()

    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Sync the WooCommerce catalog")
    parser.add_argument("--skip-sync", action="store_true", help="Only export, do not sync")
    parser.add_argument("--export", default=None, help="Write a PDF catalog to this path")
    parser.add_argument("--category", default=None, help="Export only this category")
    args = parser.parse_args()

    if args.skip_sync and not args.export:
        parser.error("--skip-sync requires --export")

    sys.exit(asyncio.run(run(args.skip_sync, args.export, args.category)))


if __name__ == "__main__":
    main()
