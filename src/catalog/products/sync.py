"""One-shot catalog sync: WooCommerce snapshot -> local catalog store.

CatalogSyncService.synchronize():
1. Loads company settings (SettingsMissingError if absent)
2. Fetches the remote listing through WooCommerceClient
3. Upserts every product keyed by external_id, touching store-of-record
   fields only, so catalog_price overrides survive
4. Returns a SyncResult once every row is written

Remote and store failures are wrapped in a single SyncFailedError with the
original exception as __cause__. Writes are idempotent per external_id, so
re-running after a failure converges. Concurrent syncs from different
sessions are not coordinated: last write wins per field.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

import structlog

from src.catalog.core.monitoring import catalog_products_synced_total, catalog_sync_total
from src.catalog.products.errors import (
    CatalogError,
    RemoteCatalogError,
    SettingsMissingError,
    SyncFailedError,
)
from src.catalog.products.schemas import SyncResult
from src.catalog.products.store import CatalogStore, SettingsProvider
from src.catalog.products.woocommerce import WooCommerceClient

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CatalogSyncService:
    """Drives WooCommerceClient -> CatalogStore.

    Args:
        settings_provider: Source of the company settings row.
        store: Catalog store receiving the upserts.
        client: WooCommerce client used for the fetch.
        clock: Returns the sync timestamp; defaults to UTC now.
    """

    def __init__(
        self,
        settings_provider: SettingsProvider,
        store: CatalogStore,
        client: WooCommerceClient,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._settings = settings_provider
        self._store = store
        self._client = client
        self._clock = clock

    async def synchronize(self) -> SyncResult:
        """Run one sync and return how many products were written.

        Raises:
            SettingsMissingError: No settings row exists.
            SyncFailedError: The fetch or the store write failed.
        """
        settings = await self._settings.get_company_settings()
        if settings is None:
            catalog_sync_total.labels(status="no_settings").inc()
            logger.warning("catalog_sync.settings_missing")
            raise SettingsMissingError()

        logger.info("catalog_sync.started", store_url=settings.woocommerce_url)

        try:
            products = await self._client.fetch_catalog(settings.to_credentials())
        except RemoteCatalogError as exc:
            catalog_sync_total.labels(status="remote_error").inc()
            logger.error(
                "catalog_sync.failed",
                phase="fetch",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise SyncFailedError(exc.user_message) from exc

        logger.info("catalog_sync.fetched", count=len(products))

        synced_at = self._clock()
        if not products:
            catalog_sync_total.labels(status="success").inc()
            logger.info("catalog_sync.completed", written=0)
            return SyncResult(written=0, synced_at=synced_at)

        try:
            written = await self._store.upsert_by_key(products, synced_at)
        except CatalogError as exc:
            catalog_sync_total.labels(status="store_error").inc()
            logger.error("catalog_sync.failed", phase="store", error=str(exc))
            raise SyncFailedError(exc.user_message) from exc
        except Exception as exc:
            catalog_sync_total.labels(status="store_error").inc()
            logger.error(
                "catalog_sync.failed",
                phase="store",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise SyncFailedError() from exc

        catalog_sync_total.labels(status="success").inc()
        catalog_products_synced_total.inc(written)
        logger.info("catalog_sync.completed", written=written)
        return SyncResult(written=written, synced_at=synced_at)
