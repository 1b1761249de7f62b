"""Midocean order gateway client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from approval_gate.config import Settings
from approval_gate.errors import UpstreamFailure

logger = logging.getLogger(__name__)

SERVICE = "midocean"
CREATE_ORDER_PATH = "/gateway/order/2.1/create"
# Shopify note attribute holding the vendor reference
REFERENCE_NOTE_ATTRIBUTE = "midocean_order_number"


class MidoceanClient:
    def __init__(self, settings: Settings, http: httpx.Client | None = None):
        self.base_url = settings.midocean_base_url.rstrip("/")
        self._http = http or httpx.Client(timeout=settings.http_timeout_seconds)
        self._headers = {
            "x-Gateway-APIKey": settings.midocean_api_key,
            "Accept": "text/json",
            "Content-Type": "application/json",
        }

    def close(self) -> None:
        self._http.close()

    def create_order(self, payload: dict[str, Any]) -> str:
        """Submit an order. Returns the Midocean order number ("" if none given).

        A rejection raises UpstreamFailure with the gateway's body verbatim.
        """
        response = self._http.post(f"{self.base_url}{CREATE_ORDER_PATH}", json=payload, headers=self._headers)
        if not response.is_success:
            logger.warning("Midocean rejected order: HTTP %d", response.status_code)
            raise UpstreamFailure(SERVICE, response.status_code, response.text)
        try:
            data = response.json() or {}
        except ValueError:
            logger.warning("Midocean accepted order but returned a non-JSON body")
            return ""
        return str(data.get("order_number") or data.get("number") or "")
