"""Tests for CatalogSyncService.

Uses the in-memory catalog store and a fake WooCommerce client. Verifies:
- Re-syncing an unchanged listing is idempotent
- external_id stays unique across syncs
- catalog_price overrides survive a sync while store-of-record fields update
- An empty listing is a successful no-op
- Missing settings and remote/store failures surface as the right errors
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from src.catalog.products.errors import (
    CatalogError,
    RemoteApiError,
    RemoteAuthError,
    SettingsMissingError,
    SyncFailedError,
)
from src.catalog.products.sync import CatalogSyncService
from tests.doubles import (
    SYNC_TIME,
    FakeWooCommerceClient,
    InMemoryCatalogStore,
    InMemorySettingsProvider,
    make_product,
)


@pytest.mark.asyncio
async def test_sync_writes_every_product(sync_service, store):
    result = await sync_service.synchronize()

    assert result.written == 2
    assert result.synced_at == SYNC_TIME
    assert await store.count_rows("products") == 2
    widget = store.by_external_id(1)
    assert widget.name == "Widget"
    assert widget.price == Decimal("19.90")
    assert widget.last_synced_at == SYNC_TIME


@pytest.mark.asyncio
async def test_sync_passes_settings_credentials(sync_service, remote):
    await sync_service.synchronize()

    assert len(remote.calls) == 1
    credentials = remote.calls[0]
    assert credentials.base_url == "https://shop.acme.example"
    assert credentials.api_key == "ck_test"
    assert credentials.api_secret == "cs_test"


@pytest.mark.asyncio
async def test_resync_is_idempotent(sync_service, store):
    await sync_service.synchronize()
    first = {p.external_id: p for p in await store.select_all()}

    await sync_service.synchronize()
    second = {p.external_id: p for p in await store.select_all()}

    assert first.keys() == second.keys()
    for external_id, product in first.items():
        again = second[external_id]
        assert again.id == product.id
        assert again.name == product.name
        assert again.price == product.price
        assert again.category == product.category


@pytest.mark.asyncio
async def test_external_id_stays_unique(settings_provider, store):
    remote = FakeWooCommerceClient([make_product(7), make_product(8)])
    service = CatalogSyncService(settings_provider, store, remote, clock=lambda: SYNC_TIME)

    await service.synchronize()
    remote.products = [make_product(7, name="Renamed"), make_product(9)]
    await service.synchronize()

    products = await store.select_all()
    external_ids = [p.external_id for p in products]
    assert sorted(external_ids) == [7, 8, 9]
    assert len(set(external_ids)) == len(external_ids)
    assert store.by_external_id(7).name == "Renamed"


@pytest.mark.asyncio
async def test_catalog_price_survives_sync(sync_service, store, remote):
    await sync_service.synchronize()
    widget = store.by_external_id(1)
    await store.update_field(widget.id, "catalog_price", Decimal("15.00"))

    remote.products = [
        make_product(1, name="Widget", price=Decimal("21.00"), category="Tools"),
        make_product(2, name="Gadget", price=Decimal("5.00"), category="Toys"),
    ]
    await sync_service.synchronize()

    widget = store.by_external_id(1)
    assert widget.price == Decimal("21.00")
    assert widget.catalog_price == Decimal("15.00")
    assert widget.effective_price == Decimal("15.00")


@pytest.mark.asyncio
async def test_empty_listing_is_noop(settings_provider, store):
    service = CatalogSyncService(
        settings_provider, store, FakeWooCommerceClient([]), clock=lambda: SYNC_TIME
    )

    result = await service.synchronize()

    assert result.written == 0
    assert store.upsert_calls == 0
    assert await store.count_rows("products") == 0


@pytest.mark.asyncio
async def test_missing_settings_blocks_sync(store, remote):
    service = CatalogSyncService(InMemorySettingsProvider(None), store, remote)

    with pytest.raises(SettingsMissingError):
        await service.synchronize()

    assert remote.calls == []
    assert store.upsert_calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "remote_error",
    [RemoteAuthError(401), RemoteApiError(500, "Internal Server Error")],
)
async def test_remote_failure_is_wrapped(settings_provider, remote_error):
    store = InMemoryCatalogStore()
    service = CatalogSyncService(
        settings_provider, store, FakeWooCommerceClient(error=remote_error)
    )

    with pytest.raises(SyncFailedError) as exc_info:
        await service.synchronize()

    assert exc_info.value.__cause__ is remote_error
    assert exc_info.value.user_message == remote_error.user_message
    assert store.upsert_calls == 0


@pytest.mark.asyncio
async def test_store_failure_is_wrapped(sync_service, store):
    store.fail_upsert = RuntimeError("connection reset")

    with pytest.raises(SyncFailedError) as exc_info:
        await sync_service.synchronize()

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert isinstance(exc_info.value, CatalogError)


@pytest.mark.asyncio
async def test_failed_sync_can_be_retried(sync_service, store):
    store.fail_upsert = RuntimeError("connection reset")
    with pytest.raises(SyncFailedError):
        await sync_service.synchronize()

    store.fail_upsert = None
    result = await sync_service.synchronize()

    assert result.written == 2
    assert await store.count_rows("products") == 2
