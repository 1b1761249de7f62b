"""FastAPI application factory for the approval gate.

Wiring only: Settings are built once here and passed to every component.
Error boundary:
- ApprovalGateError -> its status code, HTML for /admin/*, JSON elsewhere
- UpstreamFailure   -> 502 with the upstream status and body verbatim,
                       except on /webhooks/* where the body is withheld
- anything else     -> logged, generic 500, never crashes the worker
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

from approval_gate.clients.midocean import MidoceanClient
from approval_gate.clients.shopify import ShopifyClient
from approval_gate.config import Settings
from approval_gate.errors import ApprovalGateError, UpstreamFailure
from approval_gate.orders.coordinator import OrderCoordinator
from approval_gate.security.capability import CapabilityTokenCodec
from approval_gate.web.pages import render_error
from approval_gate.web.routes import register_admin_routes
from approval_gate.webhooks.handlers import register_webhook_routes
from approval_gate.webhooks.verification import WebhookAuthenticator

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)


def _wants_html(request: Request) -> bool:
    return request.url.path.startswith("/admin")


def _error_response(request: Request, status_code: int, message: str, detail: str = ""):
    if _wants_html(request):
        return HTMLResponse(render_error(message, detail), status_code=status_code)
    content = {"ok": False, "error": message}
    if detail and not request.url.path.startswith("/webhooks"):
        content["detail"] = detail
    return JSONResponse(content, status_code=status_code)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(UpstreamFailure)
    async def upstream_failure(request: Request, exc: UpstreamFailure):
        logger.warning("%s %s: %s", request.method, request.url.path, exc.message)
        return _error_response(request, exc.status_code, exc.message, exc.body)

    @app.exception_handler(ApprovalGateError)
    async def approval_error(request: Request, exc: ApprovalGateError):
        return _error_response(request, exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unexpected error on %s %s", request.method, request.url.path)
        return _error_response(request, 500, "Unexpected error")


def create_app(
    settings: Settings | None = None,
    shopify: ShopifyClient | None = None,
    midocean: MidoceanClient | None = None,
) -> FastAPI:
    """Build the app. Clients may be injected (tests pass httpx mock transports)."""
    settings = settings or Settings()

    codec = CapabilityTokenCodec(settings.approval_secret, settings.approval_ttl_minutes)
    authenticator = WebhookAuthenticator(settings.shopify_webhook_secret)
    coordinator = OrderCoordinator(
        codec,
        shopify or ShopifyClient(settings),
        midocean or MidoceanClient(settings),
        page_size=settings.pending_page_size,
        reopen_terminal_orders=settings.reopen_terminal_orders,
    )

    app = FastAPI(title="Order Approval Gate")
    app.state.settings = settings
    app.state.coordinator = coordinator

    install_error_handlers(app)
    register_webhook_routes(app, coordinator, authenticator)
    register_admin_routes(app, coordinator, settings)

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "approval_secret": bool(settings.approval_secret),
            "webhook_secret": bool(settings.shopify_webhook_secret),
            "shopify": settings.shopify_configured,
            "midocean": bool(settings.midocean_api_key),
        }

    return app


def main() -> None:
    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
