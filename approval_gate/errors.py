"""Error taxonomy for the approval gate.

Every failure the HTTP boundary knows how to render is an ApprovalGateError
carrying its own status code. Anything else is "unexpected" and becomes a
generic 500 in serve.py.
"""

from __future__ import annotations


class ApprovalGateError(Exception):
    """Base class for errors rendered with a specific HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthenticationFailure(ApprovalGateError):
    """Bad, missing or expired capability token or webhook signature."""

    status_code = 401


class OrderNotFound(ApprovalGateError):
    """The order id does not resolve on the source platform."""

    status_code = 404

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class MalformedInput(ApprovalGateError):
    """Required request fields are missing or invalid."""

    status_code = 400


class ConfigurationError(ApprovalGateError):
    """A required secret or credential is not configured."""

    status_code = 500


class UpstreamFailure(ApprovalGateError):
    """Shopify or Midocean answered with a non-success status."""

    status_code = 502

    def __init__(self, service: str, status: int, body: str = ""):
        self.service = service
        self.status = status
        self.body = body
        super().__init__(f"{service} request failed ({status})")
