"""Fixtures wiring the in-memory doubles into a sync service and workspace."""

from __future__ import annotations

from decimal import Decimal

import pytest

from src.catalog.products.sync import CatalogSyncService
from src.catalog.workspace.session import CatalogWorkspace
from tests.doubles import (
    SYNC_TIME,
    FakeWooCommerceClient,
    InMemoryCatalogStore,
    InMemorySettingsProvider,
    make_product,
    make_settings,
)


@pytest.fixture
def store() -> InMemoryCatalogStore:
    return InMemoryCatalogStore()


@pytest.fixture
def settings_provider() -> InMemorySettingsProvider:
    return InMemorySettingsProvider(make_settings())


@pytest.fixture
def remote() -> FakeWooCommerceClient:
    return FakeWooCommerceClient(
        [
            make_product(1, name="Widget", price=Decimal("19.90"), category="Tools"),
            make_product(2, name="Gadget", price=Decimal("5.00"), category="Toys"),
        ]
    )


@pytest.fixture
def sync_service(settings_provider, store, remote) -> CatalogSyncService:
    return CatalogSyncService(
        settings_provider=settings_provider,
        store=store,
        client=remote,
        clock=lambda: SYNC_TIME,
    )


@pytest.fixture
def workspace(store, settings_provider, sync_service) -> CatalogWorkspace:
    return CatalogWorkspace(
        store=store,
        settings_provider=settings_provider,
        sync_service=sync_service,
    )
