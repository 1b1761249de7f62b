"""Webhook HTTP handlers: Shopify orders/create intake.

Each request:
1. Reads the raw body (needed for HMAC verification)
2. Verifies the Shopify signature over those exact bytes
3. Parses the order JSON
4. Hands it to the coordinator, which re-reads the order and tags it MO:PENDING

Security contract:
- Return 401 only for signature failures, with no detail
- Never parse or re-serialize the body before verification
- Log all webhook activity for the audit trail
- Never return upstream error details to the webhook caller
"""

from __future__ import annotations

import json
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from approval_gate.errors import AuthenticationFailure, MalformedInput
from approval_gate.orders.coordinator import OrderCoordinator
from approval_gate.webhooks.verification import WebhookAuthenticator

logger = logging.getLogger(__name__)

ORDERS_CREATE_PATH = "/webhooks/shopify/orders-create"


def _log_webhook(order_id: object, topic: str, status: str) -> None:
    logger.info("WEBHOOK_AUDIT order=%s topic=%s status=%s", order_id, topic or "-", status)


def register_webhook_routes(
    app: FastAPI,
    coordinator: OrderCoordinator,
    authenticator: WebhookAuthenticator,
) -> None:
    """Register the Shopify webhook endpoint on the FastAPI app."""

    async def receive(request: Request) -> JSONResponse:
        body = await request.body()
        headers = {k.lower(): v for k, v in request.headers.items()}
        topic = headers.get("x-shopify-topic", "")

        if not authenticator.verify_headers(body, headers):
            _log_webhook("unknown", topic, "signature_failed")
            raise AuthenticationFailure("HMAC invalid")

        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            _log_webhook("unknown", topic, "invalid_json")
            raise MalformedInput("Invalid JSON body")
        if not isinstance(payload, dict) or not payload.get("id"):
            _log_webhook("unknown", topic, "missing_id")
            raise MalformedInput("Order id missing")

        try:
            result = await run_in_threadpool(coordinator.ingest_webhook, payload)
        except MalformedInput:
            _log_webhook(payload.get("id"), topic, "invalid_order")
            raise

        _log_webhook(result.order_id, topic, "queued" if result.changed else "unchanged")
        return JSONResponse({"ok": True, "order_id": result.order_id, "state": result.state.value})

    async def ping() -> dict:
        return {"ok": True, "method": "GET"}

    for path in (ORDERS_CREATE_PATH, "/webhooks/shopify"):
        app.add_api_route(path, receive, methods=["POST"])
        app.add_api_route(path, ping, methods=["GET"])

    logger.info("Webhook routes registered: %s", ORDERS_CREATE_PATH)
