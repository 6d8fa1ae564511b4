"""Async HTTP client for the WooCommerce REST API (wc/v3).

WooCommerceClient fetches the product listing of the configured store and
normalizes each wire record into a NormalizedProduct. Credentials are passed
per call, so settings edits take effect on the next sync without rebuilding
the client.

One network attempt per call, no retry: the caller (ultimately the user
pressing "sync" again) owns the retry policy. Only the first page of
results is fetched (per_page=100); larger stores are truncated and a
warning is logged.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
import structlog

from src.catalog.products.errors import RemoteApiError, RemoteAuthError, RemoteShapeError
from src.catalog.products.schemas import NormalizedProduct, RemoteCredentials

logger = structlog.get_logger(__name__)

PRODUCTS_PATH = "wp-json/wc/v3/products"
DEFAULT_PAGE_SIZE = 100
PUBLISHED_STATUS = "publish"

_AUTH_FAILURE_STATUSES = (401, 403)
_MAX_LOGGED_BODY = 500


# ── Normalization ───────────────────────────────────────────────────────────


def parse_price(raw: Any) -> Decimal:
    """Parse a WooCommerce price string; anything unparsable becomes 0."""
    if raw is None or isinstance(raw, bool):
        return Decimal("0")
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        return Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    return value


def _first(items: Any, key: str) -> str | None:
    """Return items[0][key] when items is a non-empty list of mappings."""
    if not isinstance(items, list) or not items:
        return None
    head = items[0]
    if not isinstance(head, Mapping):
        return None
    value = head.get(key)
    return str(value) if value else None


def normalize_product(record: Any) -> NormalizedProduct:
    """Convert one wc/v3 product record into the canonical shape.

    Raises:
        RemoteShapeError: If the record is not an object with an integer id.
    """
    if not isinstance(record, Mapping):
        raise RemoteShapeError("Produto inválido na resposta do WooCommerce.")
    external_id = record.get("id")
    if not isinstance(external_id, int) or isinstance(external_id, bool):
        raise RemoteShapeError("Produto sem identificador na resposta do WooCommerce.")

    description = record.get("description")
    return NormalizedProduct(
        external_id=external_id,
        name=str(record.get("name") or ""),
        price=parse_price(record.get("price")),
        description=str(description) if description is not None else None,
        image_url=_first(record.get("images"), "src"),
        category=_first(record.get("categories"), "name"),
        active=record.get("status") == PUBLISHED_STATUS,
    )


def basic_auth_header(api_key: str, api_secret: str) -> str:
    """Build the HTTP Basic Authorization header value for key:secret."""
    token = base64.b64encode(f"{api_key}:{api_secret}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def products_url(base_url: str) -> str:
    """Join the store base URL and the products endpoint path."""
    base = base_url if base_url.endswith("/") else f"{base_url}/"
    return f"{base}{PRODUCTS_PATH}"


# ── Client ──────────────────────────────────────────────────────────────────


class WooCommerceClient:
    """Async client for the WooCommerce products endpoint.

    Args:
        page_size: per_page query value (single page only).
        timeout: Request timeout in seconds; None keeps the httpx default.
    """

    def __init__(
        self,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: float | None = None,
    ) -> None:
        self._page_size = page_size
        self._timeout = timeout

    def _client(self, credentials: RemoteCredentials) -> httpx.AsyncClient:
        """Create a new httpx client carrying the auth headers."""
        headers = {
            "Authorization": basic_auth_header(credentials.api_key, credentials.api_secret),
            "Content-Type": "application/json",
        }
        if self._timeout is None:
            return httpx.AsyncClient(headers=headers)
        return httpx.AsyncClient(headers=headers, timeout=self._timeout)

    async def fetch_catalog(self, credentials: RemoteCredentials) -> list[NormalizedProduct]:
        """Fetch and normalize the remote product listing.

        GET {base_url}/wp-json/wc/v3/products?per_page=100

        Args:
            credentials: Store URL plus REST API key and secret.

        Returns:
            Normalized products in the order the store returned them.

        Raises:
            RemoteAuthError: Store answered 401/403.
            RemoteApiError: Any other non-2xx answer, or no answer at all.
            RemoteShapeError: Payload is not a list of product records.
        """
        url = products_url(credentials.base_url)
        async with self._client(credentials) as client:
            try:
                response = await client.get(url, params={"per_page": self._page_size})
            except httpx.HTTPError as exc:
                logger.error("woocommerce.request_failed", url=url, error=str(exc))
                raise RemoteApiError(None, str(exc)) from exc

        if response.status_code in _AUTH_FAILURE_STATUSES:
            logger.warning(
                "woocommerce.auth_rejected",
                url=url,
                status_code=response.status_code,
            )
            raise RemoteAuthError(response.status_code)

        if not response.is_success:
            body = response.text
            logger.error(
                "woocommerce.api_error",
                url=url,
                status_code=response.status_code,
                body=body[:_MAX_LOGGED_BODY],
            )
            raise RemoteApiError(response.status_code, body)

        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteShapeError() from exc

        if not isinstance(payload, list):
            logger.error("woocommerce.unexpected_payload", url=url, type=type(payload).__name__)
            raise RemoteShapeError()

        products = [normalize_product(record) for record in payload]

        total_pages = response.headers.get("X-WP-TotalPages")
        if total_pages and total_pages.isdigit() and int(total_pages) > 1:
            logger.warning(
                "woocommerce.catalog_truncated",
                fetched=len(products),
                total_pages=int(total_pages),
                total=response.headers.get("X-WP-Total"),
            )

        logger.info("woocommerce.catalog_fetched", count=len(products))
        return products
