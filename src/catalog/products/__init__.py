"""Product catalog module -- WooCommerce client, catalog store and sync.

Provides the canonical product schemas, the SQLAlchemy models and
repositories for products and company settings, the WooCommerce REST
client that normalizes remote records, and CatalogSyncService, which
upserts a remote snapshot into the local store.
"""

from src.catalog.products.errors import (
    CatalogError,
    PriceUpdateError,
    ProductNotFoundError,
    RemoteApiError,
    RemoteAuthError,
    RemoteCatalogError,
    RemoteShapeError,
    RenderPreconditionError,
    SettingsMissingError,
    SyncFailedError,
    SyncInProgressError,
)
from src.catalog.products.store import CatalogStore, SettingsProvider
from src.catalog.products.sync import CatalogSyncService
from src.catalog.products.woocommerce import WooCommerceClient

__all__ = [
    "CatalogError",
    "CatalogStore",
    "CatalogSyncService",
    "PriceUpdateError",
    "ProductNotFoundError",
    "RemoteApiError",
    "RemoteAuthError",
    "RemoteCatalogError",
    "RemoteShapeError",
    "RenderPreconditionError",
    "SettingsMissingError",
    "SettingsProvider",
    "SyncFailedError",
    "SyncInProgressError",
    "WooCommerceClient",
]
