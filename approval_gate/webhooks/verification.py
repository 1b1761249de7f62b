"""Webhook signature verification: constant-time HMAC over the raw body.

Security contract:
- Verification runs on the raw request bytes, before any JSON parsing
- All comparisons use hmac.compare_digest() (constant-time, no timing attacks)
- Verification failure -> 401 immediately, no payload processing
- Missing secret -> verification always fails (fail-closed)
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)

# Shopify sends the base64 HMAC-SHA256 of the body in this header
SHOPIFY_HMAC_HEADER = "x-shopify-hmac-sha256"


class WebhookAuthenticator:
    """Verifies Shopify webhook signatures with the shared webhook secret."""

    def __init__(self, secret: str):
        self._secret = secret

    def verify(self, body: bytes, signature_header: str | None) -> bool:
        """Verify Shopify webhook HMAC-SHA256 signature.

        Args:
            body: Raw request body bytes
            signature_header: Value of X-Shopify-Hmac-SHA256 header

        Returns:
            True if signature is valid
        """
        if not self._secret:
            logger.warning("SHOPIFY_WEBHOOK_SECRET not set, rejecting webhook")
            return False
        if not signature_header:
            return False

        computed = hmac.new(
            self._secret.encode("utf-8"),
            body,
            hashlib.sha256,
        ).digest()
        computed_b64 = base64.b64encode(computed)

        try:
            presented = signature_header.strip().encode("ascii")
        except UnicodeEncodeError:
            return False
        return hmac.compare_digest(computed_b64, presented)

    def verify_headers(self, body: bytes, headers: dict[str, str]) -> bool:
        """Verify using a lowercase-keyed headers dict."""
        return self.verify(body, headers.get(SHOPIFY_HMAC_HEADER))
