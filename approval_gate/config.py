"""Approval gate configuration."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Environment-driven settings, built once at startup and passed down."""

    # Capability tokens for approve/reject links
    approval_secret: str = ""
    approval_ttl_minutes: int = 2880

    # Shopify (source platform)
    shopify_webhook_secret: str = ""
    shopify_shop: str = ""
    shopify_api_version: str = "2024-07"
    shopify_access_token: str = ""

    # Midocean (fulfillment vendor)
    midocean_base_url: str = "https://api.midocean.com"
    midocean_api_key: str = ""

    pending_page_size: int = 100
    http_timeout_seconds: float = 30.0
    # Re-queue orders that already reached MO:SENT / MO:REJECTED when a
    # webhook is re-delivered. Off: terminal states are absorbing.
    reopen_terminal_orders: bool = False

    log_level: str = "INFO"
    port: int = 8080

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def shopify_configured(self) -> bool:
        return bool(self.shopify_shop and self.shopify_access_token)
