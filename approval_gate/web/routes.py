"""Reviewer routes: pending listing and approve/reject actions.

Each action is a stateless request: the capability token in the link is
the only credential. Errors are raised as ApprovalGateError and rendered
by the handlers installed in serve.py.
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from starlette.concurrency import run_in_threadpool

from approval_gate.config import Settings
from approval_gate.errors import ConfigurationError
from approval_gate.orders.coordinator import OrderCoordinator
from approval_gate.web.pages import APPROVE_PATH, REJECT_PATH, render_pending, render_result
from approval_gate.web.params import ActionParams, parse_action_params, parse_body

logger = logging.getLogger(__name__)


def _require_shopify(settings: Settings) -> None:
    if not settings.shopify_configured:
        raise ConfigurationError("Missing Shopify configuration")


async def _read_action_params(request: Request) -> ActionParams:
    form, body = {}, {}
    if request.method == "POST":
        form, body = parse_body(request.headers.get("content-type", ""), await request.body())
    return parse_action_params(dict(request.query_params), form, body)


def register_admin_routes(app: FastAPI, coordinator: OrderCoordinator, settings: Settings) -> None:
    """Register /admin/* (HTML) and /api/pending (JSON) on the app."""

    def _pending():
        _require_shopify(settings)
        if not settings.approval_secret:
            raise ConfigurationError("Missing APPROVAL_SECRET")
        return coordinator.list_pending()

    @app.get("/admin/pending", response_class=HTMLResponse)
    async def pending_page():
        """Pending orders with approve/reject forms."""
        entries = await run_in_threadpool(_pending)
        return HTMLResponse(render_pending(entries))

    @app.get("/api/pending")
    async def pending_json():
        entries = await run_in_threadpool(_pending)
        return {
            "count": len(entries),
            "orders": [
                {
                    "id": e.order.id,
                    "name": e.order.name,
                    "created_at": e.order.created_at,
                    "email": e.order.email,
                    "expires": e.expires,
                    "token": e.token,
                }
                for e in entries
            ],
        }

    @app.api_route(APPROVE_PATH, methods=["GET", "POST"], response_class=HTMLResponse)
    async def approve(request: Request):
        params = await _read_action_params(request)
        _require_shopify(settings)
        result = await run_in_threadpool(coordinator.approve, params.id, params.token, params.expires)
        return HTMLResponse(render_result(result))

    @app.post(REJECT_PATH, response_class=HTMLResponse)
    async def reject(request: Request):
        params = await _read_action_params(request)
        _require_shopify(settings)
        result = await run_in_threadpool(coordinator.reject, params.id, params.token, params.expires)
        return HTMLResponse(render_result(result))

    @app.post("/api/approve")
    async def approve_json(request: Request):
        params = await _read_action_params(request)
        _require_shopify(settings)
        result = await run_in_threadpool(coordinator.approve, params.id, params.token, params.expires)
        return asdict(result)

    @app.post("/api/reject")
    async def reject_json(request: Request):
        params = await _read_action_params(request)
        _require_shopify(settings)
        result = await run_in_threadpool(coordinator.reject, params.id, params.token, params.expires)
        return asdict(result)

    logger.info("Admin routes registered: /admin/{pending,approve,reject}, /api/{pending,approve,reject}")
