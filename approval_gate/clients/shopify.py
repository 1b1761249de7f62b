"""Shopify Admin REST client for order reads and tag updates."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from approval_gate.config import Settings
from approval_gate.errors import OrderNotFound, UpstreamFailure
from approval_gate.orders.models import Order

logger = logging.getLogger(__name__)

SERVICE = "shopify"


class ShopifyClient:
    """Reads orders and writes tags / note attributes back."""

    def __init__(self, settings: Settings, http: httpx.Client | None = None):
        self.base_url = f"https://{settings.shopify_shop}/admin/api/{settings.shopify_api_version}"
        self._http = http or httpx.Client(timeout=settings.http_timeout_seconds)
        self._headers = {
            "X-Shopify-Access-Token": settings.shopify_access_token,
            "Content-Type": "application/json",
        }

    def close(self) -> None:
        self._http.close()

    def _check(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        logger.warning("Shopify %s failed: HTTP %d", action, response.status_code)
        raise UpstreamFailure(SERVICE, response.status_code, response.text)

    def _json(self, response: httpx.Response, action: str) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            logger.warning("Shopify %s returned a non-object body: HTTP %d", action, response.status_code)
            raise UpstreamFailure(SERVICE, response.status_code, response.text)
        return data

    def get_order(self, order_id: int) -> Order:
        response = self._http.get(f"{self.base_url}/orders/{order_id}.json", headers=self._headers)
        if response.status_code == 404:
            raise OrderNotFound(order_id)
        self._check(response, "read")
        data = self._json(response, "read").get("order") or {}
        if not isinstance(data, dict) or not data.get("id"):
            raise OrderNotFound(order_id)
        return Order.from_payload(data)

    def list_recent_orders(self, limit: int = 100) -> list[Order]:
        """Most recent orders first, one page."""
        params = {
            "status": "any",
            "financial_status": "any",
            "fulfillment_status": "any",
            "limit": limit,
            "order": "created_at desc",
        }
        response = self._http.get(f"{self.base_url}/orders.json", params=params, headers=self._headers)
        self._check(response, "list")
        orders = []
        for data in self._json(response, "list").get("orders") or []:
            try:
                orders.append(Order.from_payload(data))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping order without usable id in listing")
        return orders

    def update_order(
        self,
        order_id: int,
        tags: str,
        note_attributes: list[dict[str, Any]] | None = None,
    ) -> None:
        """PUT the full resulting tag string (and optional note attributes)."""
        body: dict[str, Any] = {"id": order_id, "tags": tags}
        if note_attributes is not None:
            body["note_attributes"] = note_attributes
        response = self._http.put(
            f"{self.base_url}/orders/{order_id}.json",
            json={"order": body},
            headers=self._headers,
        )
        self._check(response, "update")
