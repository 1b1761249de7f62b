"""Shared fixtures: settings, in-memory Shopify / Midocean fakes, and the app.

The fakes are httpx.MockTransport handlers, so the real ShopifyClient and
MidoceanClient run unchanged against them.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import re
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from approval_gate.clients.midocean import MidoceanClient
from approval_gate.clients.shopify import ShopifyClient
from approval_gate.config import Settings
from approval_gate.orders.coordinator import OrderCoordinator
from approval_gate.security.capability import CapabilityTokenCodec
from approval_gate.serve import create_app

APPROVAL_SECRET = "approval-test-secret"
WEBHOOK_SECRET = "webhook-test-secret"

_ORDER_PATH = re.compile(r"/admin/api/[^/]+/orders/(\d+)\.json$")
_ORDERS_PATH = re.compile(r"/admin/api/[^/]+/orders\.json$")


class FakeShop:
    """In-memory Shopify Admin REST: GET/PUT orders/{id}.json, GET orders.json."""

    def __init__(self) -> None:
        self.orders: dict[int, dict[str, Any]] = {}
        self.puts: list[dict[str, Any]] = []
        self.fail_reads = False
        self.fail_updates = False

    def add(self, order: dict[str, Any]) -> dict[str, Any]:
        self.orders[int(order["id"])] = order
        return order

    def tags(self, order_id: int) -> set[str]:
        raw = self.orders[order_id].get("tags") or ""
        return {t.strip() for t in raw.split(",") if t.strip()}

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if _ORDERS_PATH.search(path) and request.method == "GET":
            if self.fail_reads:
                return httpx.Response(503, text="unavailable")
            limit = int(request.url.params.get("limit", "50"))
            orders = sorted(self.orders.values(), key=lambda o: o.get("created_at", ""), reverse=True)
            return httpx.Response(200, json={"orders": orders[:limit]})

        match = _ORDER_PATH.search(path)
        if not match:
            return httpx.Response(404, json={"errors": "Not Found"})
        order_id = int(match.group(1))

        if request.method == "GET":
            if self.fail_reads:
                return httpx.Response(503, text="unavailable")
            if order_id not in self.orders:
                return httpx.Response(404, json={"errors": "Not Found"})
            return httpx.Response(200, json={"order": self.orders[order_id]})

        if request.method == "PUT":
            body = json.loads(request.content)["order"]
            self.puts.append(body)
            if self.fail_updates:
                return httpx.Response(500, text="write failed")
            order = self.orders.setdefault(order_id, {"id": order_id})
            order["tags"] = body["tags"]
            if "note_attributes" in body:
                order["note_attributes"] = body["note_attributes"]
            return httpx.Response(200, json={"order": order})

        return httpx.Response(405)


class FakeMidocean:
    """Records create-order calls; answers with a fixed reference or an error."""

    def __init__(self) -> None:
        self.payloads: list[dict[str, Any]] = []
        self.reject_with: tuple[int, str] | None = None
        self.next_number = 7000

    def handler(self, request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/gateway/order/2.1/create"
        assert request.headers["x-gateway-apikey"] == "mo-key"
        if self.reject_with:
            status, text = self.reject_with
            return httpx.Response(status, text=text)
        self.payloads.append(json.loads(request.content))
        self.next_number += 1
        return httpx.Response(200, json={"order_number": str(self.next_number)})


def make_order(order_id: int = 500, tags: str = "", **overrides: Any) -> dict[str, Any]:
    order = {
        "id": order_id,
        "name": f"#{order_id}",
        "order_number": order_id + 1000,
        "email": "buyer@example.com",
        "currency": "EUR",
        "created_at": "2024-07-01T10:00:00+02:00",
        "tags": tags,
        "line_items": [
            {"title": "Mug", "sku": "ABC123-MID", "quantity": 2, "price": "5.00", "properties": []}
        ],
        "shipping_address": {
            "name": "Ada Buyer",
            "company": "Acme",
            "address1": "Main Street 1",
            "address2": "",
            "zip": "1000AA",
            "city": "Amsterdam",
            "province": "NH",
            "country_code": "NL",
            "phone": "+31000000",
        },
    }
    order.update(overrides)
    return order


def shopify_signature(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    return base64.b64encode(hmac.new(secret.encode(), body, hashlib.sha256).digest()).decode()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        approval_secret=APPROVAL_SECRET,
        shopify_webhook_secret=WEBHOOK_SECRET,
        shopify_shop="test-shop.myshopify.com",
        shopify_access_token="shpat_test",
        midocean_base_url="https://mo.test",
        midocean_api_key="mo-key",
    )


@pytest.fixture()
def shop() -> FakeShop:
    return FakeShop()


@pytest.fixture()
def vendor() -> FakeMidocean:
    return FakeMidocean()


@pytest.fixture()
def shopify_client(settings: Settings, shop: FakeShop) -> ShopifyClient:
    return ShopifyClient(settings, http=httpx.Client(transport=httpx.MockTransport(shop.handler)))


@pytest.fixture()
def midocean_client(settings: Settings, vendor: FakeMidocean) -> MidoceanClient:
    return MidoceanClient(settings, http=httpx.Client(transport=httpx.MockTransport(vendor.handler)))


@pytest.fixture()
def codec(settings: Settings) -> CapabilityTokenCodec:
    return CapabilityTokenCodec(settings.approval_secret, settings.approval_ttl_minutes)


@pytest.fixture()
def coordinator(
    codec: CapabilityTokenCodec,
    shopify_client: ShopifyClient,
    midocean_client: MidoceanClient,
) -> OrderCoordinator:
    return OrderCoordinator(codec, shopify_client, midocean_client)


@pytest.fixture()
def client(settings: Settings, shopify_client: ShopifyClient, midocean_client: MidoceanClient):
    app = create_app(settings, shopify=shopify_client, midocean=midocean_client)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture()
def order_factory():
    return make_order


@pytest.fixture()
def sign_webhook():
    return shopify_signature
