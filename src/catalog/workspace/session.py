"""Catalog workspace -- per-page-load state for browsing, pricing and export.

A CatalogWorkspace is what one open catalog page works against:
- the product list loaded from the catalog store
- the selection set and the price-edit ledger
- the error banner text and the is_syncing flag
- the current view (catalog or settings)

Every async operation re-checks `alive` before applying its result, so
work that finishes after the page was closed is discarded instead of
landing on stale state. Pipeline errors are turned into the banner text
here; price-edit failures are reported to the caller only, never to the
banner.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable, Sequence
from decimal import Decimal

import structlog

from src.catalog.core.monitoring import track_render
from src.catalog.documents.renderer import render_catalog
from src.catalog.products.errors import (
    CatalogError,
    PriceUpdateError,
    ProductNotFoundError,
    RenderPreconditionError,
    SettingsMissingError,
    SyncInProgressError,
)
from src.catalog.products.schemas import (
    CatalogItem,
    CompanyInfo,
    ProductRead,
    SyncResult,
)
from src.catalog.products.store import CatalogStore, SettingsProvider
from src.catalog.products.sync import CatalogSyncService
from src.catalog.workspace.navigation import NavigationIntent, View, ViewState
from src.catalog.workspace.selection import PriceLedger, SelectionSet

logger = structlog.get_logger(__name__)

LOAD_FAILED_MESSAGE = (
    "Não foi possível carregar os produtos. Por favor, verifique sua conexão."
)
COMPANY_SETTINGS_MISSING_MESSAGE = (
    "Não foi possível carregar as configurações da empresa para gerar o PDF."
)
RENDER_FAILED_MESSAGE = "Erro ao gerar PDF. Por favor, tente novamente."

Renderer = Callable[..., bytes]


class CatalogWorkspace:
    """State and actions behind one open catalog page.

    Args:
        store: Catalog store for reads and catalog_price writes.
        settings_provider: Source of company branding for the export.
        sync_service: Service run by synchronize().
        renderer: PDF renderer, render_catalog by default.
        currency_prefix: Price prefix passed to the renderer.
    """

    def __init__(
        self,
        store: CatalogStore,
        settings_provider: SettingsProvider,
        sync_service: CatalogSyncService,
        renderer: Renderer = render_catalog,
        currency_prefix: str = "R$",
    ) -> None:
        self.id = str(uuid.uuid4())
        self._store = store
        self._settings = settings_provider
        self._sync_service = sync_service
        self._renderer = renderer
        self._currency_prefix = currency_prefix

        self.products: list[ProductRead] = []
        self.selection = SelectionSet()
        self.ledger = PriceLedger()
        self.view = ViewState()
        self.error: str | None = None
        self.is_syncing = False
        self._alive = True

    # ── Lifecycle ───────────────────────────────────────────────────────────

    @property
    def alive(self) -> bool:
        return self._alive

    def close(self) -> None:
        """Mark the page as gone; later results are discarded."""
        self._alive = False
        self.selection.clear()
        logger.info("workspace.closed", workspace_id=self.id)

    def navigate(self, intent: NavigationIntent) -> View:
        return self.view.navigate(intent)

    # ── Product list ────────────────────────────────────────────────────────

    async def load(self) -> list[ProductRead]:
        """(Re)load the product list from the store."""
        try:
            products = await self._store.select_all()
        except Exception as exc:
            logger.error("workspace.load_failed", workspace_id=self.id, error=str(exc))
            if self._alive:
                self.error = LOAD_FAILED_MESSAGE
            raise CatalogError(LOAD_FAILED_MESSAGE) from exc

        if not self._alive:
            logger.info("workspace.stale_result_discarded", workspace_id=self.id, op="load")
            return products

        self.products = products
        self.selection.retain(p.id for p in products)
        self.error = None
        return self.products

    def visible_products(self, search: str = "") -> list[ProductRead]:
        """Products whose name, description or category contains the search text."""
        return filter_products(self.products, search)

    def _find(self, product_id: str) -> ProductRead:
        for product in self.products:
            if product.id == product_id:
                return product
        raise ProductNotFoundError(product_id)

    # ── Selection ───────────────────────────────────────────────────────────

    def toggle(self, product_id: str) -> bool:
        """Toggle selection of a listed product; return the new state."""
        self._find(product_id)
        return self.selection.toggle(product_id)

    def selected_products(self) -> list[ProductRead]:
        """Selected products in list order."""
        return [p for p in self.products if p.id in self.selection]

    def selected_catalog_items(self) -> list[CatalogItem]:
        """Export rows for the selection, priced with the effective price."""
        return [
            CatalogItem(
                name=p.display_name,
                price=p.effective_price,
                category=p.category or None,
            )
            for p in self.selected_products()
        ]

    # ── Pricing ─────────────────────────────────────────────────────────────

    async def update_catalog_price(
        self, product_id: str, price: Decimal | None
    ) -> ProductRead:
        """Set or clear a product's catalog price.

        The in-memory list is updated first. If the store write fails, the
        ledger rolls back that single product and PriceUpdateError is raised;
        the selection and the error banner are left as they were.
        """
        if price is not None and price < 0:
            raise ValueError("Catalog price must not be negative")

        current = self._find(product_id)
        entry = self.ledger.begin(product_id, current.catalog_price, price)
        updated = current.model_copy(update={"catalog_price": price})
        self.products = [updated if p.id == product_id else p for p in self.products]

        try:
            await self._store.update_field(product_id, "catalog_price", price)
        except Exception as exc:
            logger.error(
                "workspace.price_update_failed",
                workspace_id=self.id,
                product_id=product_id,
                error=str(exc),
            )
            if self._alive:
                self.products = self.ledger.rollback(entry, self.products)
            else:
                self.ledger.commit(entry)
            raise PriceUpdateError(product_id) from exc

        self.ledger.commit(entry)
        logger.info("workspace.price_updated", workspace_id=self.id, product_id=product_id)
        return updated

    # ── Sync ────────────────────────────────────────────────────────────────

    async def synchronize(self) -> SyncResult:
        """Run a catalog sync, then reload the list.

        Raises:
            SyncInProgressError: This workspace is already syncing.
            CatalogError: Any pipeline failure; also shown in the banner.
        """
        if self.is_syncing:
            raise SyncInProgressError()

        self.is_syncing = True
        self.error = None
        try:
            result = await self._sync_service.synchronize()
            if self._alive:
                await self.load()
            else:
                logger.info("workspace.stale_result_discarded", workspace_id=self.id, op="sync")
            return result
        except CatalogError as exc:
            if self._alive:
                self.error = exc.user_message
            raise
        finally:
            self.is_syncing = False

    # ── Export ──────────────────────────────────────────────────────────────

    async def export_pdf(self) -> bytes:
        """Render the selected products as the PDF catalog.

        Raises:
            RenderPreconditionError: Nothing is selected; the renderer is not called.
            SettingsMissingError: No company settings to brand the document with.
            CatalogError: Rendering failed.
        """
        if not self.selection:
            exc = RenderPreconditionError()
            self.error = exc.user_message
            raise exc

        settings = await self._settings.get_company_settings()
        if settings is None:
            exc = SettingsMissingError(COMPANY_SETTINGS_MISSING_MESSAGE)
            self.error = exc.user_message
            raise exc

        items = self.selected_catalog_items()
        company = settings.to_company_info()
        try:
            pdf_bytes = await asyncio.to_thread(self._render, items, company)
        except Exception as exc:
            logger.error("workspace.render_failed", workspace_id=self.id, error=str(exc))
            self.error = RENDER_FAILED_MESSAGE
            raise CatalogError(RENDER_FAILED_MESSAGE) from exc

        logger.info("workspace.pdf_exported", workspace_id=self.id, product_count=len(items))
        return pdf_bytes

    def _render(self, items: Sequence[CatalogItem], company: CompanyInfo) -> bytes:
        with track_render():
            return self._renderer(items, company, currency_prefix=self._currency_prefix)

    def share_selection(self) -> None:
        """Share the selection on WhatsApp. Not implemented."""
        logger.info("workspace.share_requested", workspace_id=self.id, selected=len(self.selection))
        raise NotImplementedError("Compartilhamento pelo WhatsApp ainda não está disponível.")


def filter_products(products: Sequence[ProductRead], search: str = "") -> list[ProductRead]:
    """Case-insensitive substring match on name, plain description and category."""
    term = search.strip().lower()
    if not term:
        return list(products)
    return [p for p in products if _matches(p, term)]


def _matches(product: ProductRead, term: str) -> bool:
    haystacks = (product.display_name, product.display_description, product.category or "")
    return any(term in text.lower() for text in haystacks)
