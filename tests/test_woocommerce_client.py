"""Tests for the WooCommerce REST client and record normalization.

Covers:
- normalize_product(): field mapping, price fallback, missing images/categories
- parse_price(): malformed and non-finite values become zero
- WooCommerceClient.fetch_catalog(): URL, auth header, status mapping
  (401/403 vs other failures), payload shape checks, transport errors
"""

from __future__ import annotations

import base64
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from src.catalog.products.errors import (
    RemoteApiError,
    RemoteAuthError,
    RemoteCatalogError,
    RemoteShapeError,
)
from src.catalog.products.schemas import RemoteCredentials
from src.catalog.products.woocommerce import (
    PRODUCTS_PATH,
    WooCommerceClient,
    basic_auth_header,
    normalize_product,
    parse_price,
    products_url,
)

CREDENTIALS = RemoteCredentials(
    base_url="https://shop.example.com",
    api_key="ck_key",
    api_secret="cs_secret",
)

WIDGET_RECORD = {
    "id": 42,
    "name": "Widget",
    "price": "19.9",
    "description": "<p>Sturdy <b>widget</b></p>",
    "images": [{"src": "https://cdn.example.com/w.png"}, {"src": "https://cdn.example.com/2.png"}],
    "categories": [{"name": "Tools"}, {"name": "Hardware"}],
    "status": "publish",
}


def _response(status_code: int, **kwargs) -> httpx.Response:
    return httpx.Response(
        status_code,
        request=httpx.Request("GET", "https://shop.example.com/"),
        **kwargs,
    )


# ── Normalization ────────────────────────────────────────────────────────────


class TestNormalizeProduct:
    def test_maps_store_of_record_fields(self):
        product = normalize_product(WIDGET_RECORD)

        assert product.external_id == 42
        assert product.name == "Widget"
        assert product.price == Decimal("19.9")
        assert product.description == "<p>Sturdy <b>widget</b></p>"
        assert product.image_url == "https://cdn.example.com/w.png"
        assert product.category == "Tools"
        assert product.active is True

    def test_missing_images_and_categories_are_none(self):
        record = {**WIDGET_RECORD, "images": [], "categories": []}
        product = normalize_product(record)

        assert product.image_url is None
        assert product.category is None

    def test_non_published_status_is_inactive(self):
        product = normalize_product({**WIDGET_RECORD, "status": "draft"})
        assert product.active is False

    def test_malformed_price_becomes_zero(self):
        product = normalize_product({**WIDGET_RECORD, "price": "abc"})
        assert product.price == Decimal("0")

    def test_record_without_id_is_rejected(self):
        record = {k: v for k, v in WIDGET_RECORD.items() if k != "id"}
        with pytest.raises(RemoteShapeError):
            normalize_product(record)

    def test_non_mapping_record_is_rejected(self):
        with pytest.raises(RemoteShapeError):
            normalize_product(["not", "a", "product"])


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("19.90", Decimal("19.90")),
        (" 7 ", Decimal("7")),
        (12, Decimal("12")),
        ("", Decimal("0")),
        (None, Decimal("0")),
        ("abc", Decimal("0")),
        ("NaN", Decimal("0")),
        ("Infinity", Decimal("0")),
        (True, Decimal("0")),
    ],
)
def test_parse_price(raw, expected):
    assert parse_price(raw) == expected


def test_basic_auth_header_encodes_key_and_secret():
    header = basic_auth_header("ck_key", "cs_secret")
    assert header.startswith("Basic ")
    assert base64.b64decode(header[len("Basic "):]).decode() == "ck_key:cs_secret"


@pytest.mark.parametrize("base", ["https://shop.example.com", "https://shop.example.com/"])
def test_products_url_joins_with_single_slash(base):
    assert products_url(base) == f"https://shop.example.com/{PRODUCTS_PATH}"


# ── Client ───────────────────────────────────────────────────────────────────


class TestWooCommerceClient:
    @pytest.mark.asyncio
    async def test_fetch_catalog_requests_first_page(self):
        client = WooCommerceClient()
        mock_response = _response(200, json=[WIDGET_RECORD])

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response) as mock_get:
            products = await client.fetch_catalog(CREDENTIALS)

        assert [p.external_id for p in products] == [42]
        assert mock_get.call_args.args[0] == "https://shop.example.com/wp-json/wc/v3/products"
        assert mock_get.call_args.kwargs["params"] == {"per_page": 100}

    @pytest.mark.asyncio
    async def test_fetch_catalog_sends_basic_auth(self):
        client = WooCommerceClient()
        http_client = client._client(CREDENTIALS)
        try:
            assert http_client.headers["Authorization"] == basic_auth_header("ck_key", "cs_secret")
        finally:
            await http_client.aclose()

    @pytest.mark.asyncio
    async def test_page_size_is_configurable(self):
        client = WooCommerceClient(page_size=25)
        mock_response = _response(200, json=[])

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response) as mock_get:
            await client.fetch_catalog(CREDENTIALS)

        assert mock_get.call_args.kwargs["params"] == {"per_page": 25}

    @pytest.mark.asyncio
    async def test_empty_listing_returns_empty_list(self):
        mock_response = _response(200, json=[])

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            products = await WooCommerceClient().fetch_catalog(CREDENTIALS)

        assert products == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_auth_rejection_is_distinct(self, status_code):
        mock_response = _response(status_code, json={"code": "woocommerce_rest_cannot_view"})

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            with pytest.raises(RemoteAuthError) as exc_info:
                await WooCommerceClient().fetch_catalog(CREDENTIALS)

        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_server_error_is_api_error_with_status_and_body(self):
        mock_response = _response(500, text="Internal Server Error")

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            with pytest.raises(RemoteApiError) as exc_info:
                await WooCommerceClient().fetch_catalog(CREDENTIALS)

        error = exc_info.value
        assert not isinstance(error, RemoteAuthError)
        assert error.status_code == 500
        assert "500" in error.user_message
        assert "Internal Server Error" in error.user_message

    @pytest.mark.asyncio
    async def test_transport_error_is_api_error_without_status(self):
        with patch(
            "httpx.AsyncClient.get",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("connection refused"),
        ):
            with pytest.raises(RemoteApiError) as exc_info:
                await WooCommerceClient().fetch_catalog(CREDENTIALS)

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_non_list_payload_is_shape_error(self):
        mock_response = _response(200, json={"products": [WIDGET_RECORD]})

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            with pytest.raises(RemoteShapeError):
                await WooCommerceClient().fetch_catalog(CREDENTIALS)

    @pytest.mark.asyncio
    async def test_invalid_json_is_shape_error(self):
        mock_response = _response(200, text="<html>maintenance</html>")

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            with pytest.raises(RemoteCatalogError):
                await WooCommerceClient().fetch_catalog(CREDENTIALS)

    @pytest.mark.asyncio
    async def test_truncated_listing_still_returns_first_page(self):
        mock_response = _response(
            200,
            json=[WIDGET_RECORD],
            headers={"X-WP-TotalPages": "3", "X-WP-Total": "250"},
        )

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            products = await WooCommerceClient().fetch_catalog(CREDENTIALS)

        assert len(products) == 1
