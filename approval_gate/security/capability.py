"""Capability token codec: HMAC-signed (order_id, expires) bearer tokens.

Security contract:
- token = base64url(HMAC-SHA256(secret, "{order_id}:{expires}")), no padding
- The exact expires string presented is what gets signed; no re-formatting
- Missing secret -> verification always fails (fail-closed)
- Expiry must be strictly in the future; at or after expiry -> reject
- Comparison uses hmac.compare_digest() (constant-time, no early exit on content)
- A token is bound to the order only, not to the action: one link pair
  (approve / reject) shares a single token
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)

DEFAULT_TTL_MINUTES = 2880  # 2 days


def format_expiry(moment: datetime) -> str:
    """Format an expiry as ISO-8601 UTC with whole seconds, e.g. 2024-07-01T12:00:00Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_expiry(value: str) -> datetime | None:
    """Parse an ISO-8601 expiry. Naive values are UTC. Returns None if unparsable."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class CapabilityTokenCodec:
    """Signs and verifies approval-link tokens with a shared secret."""

    def __init__(self, secret: str, ttl_minutes: int = DEFAULT_TTL_MINUTES):
        self._secret = secret
        self.ttl = timedelta(minutes=ttl_minutes if ttl_minutes > 0 else DEFAULT_TTL_MINUTES)

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def sign(self, order_id: int | str, expires: str) -> str:
        """Deterministic token for (order_id, expires)."""
        message = f"{order_id}:{expires}".encode("utf-8")
        digest = hmac.new(self._secret.encode("utf-8"), message, hashlib.sha256).digest()
        return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")

    def verify(
        self,
        order_id: int | str | None,
        expires: str | None,
        token: str | None,
        now: datetime | None = None,
    ) -> bool:
        """Check a presented token. Never raises; any doubt -> False."""
        if not self._secret:
            logger.warning("APPROVAL_SECRET not set, rejecting capability token")
            return False
        if not order_id or not expires or not token:
            return False

        deadline = parse_expiry(expires)
        if deadline is None:
            return False
        current = now or datetime.now(timezone.utc)
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        if current >= deadline:
            return False

        expected = self.sign(order_id, expires).encode("ascii")
        try:
            presented = token.encode("ascii")
        except UnicodeEncodeError:
            return False
        return hmac.compare_digest(expected, presented)

    def mint(self, order_id: int | str, now: datetime | None = None) -> tuple[str, str]:
        """Return (expires, token) valid for the configured TTL from now."""
        current = now or datetime.now(timezone.utc)
        expires = format_expiry(current + self.ttl)
        return expires, self.sign(order_id, expires)
