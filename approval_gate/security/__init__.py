"""Capability tokens for stateless approve/reject links."""

from approval_gate.security.capability import CapabilityTokenCodec, format_expiry, parse_expiry

__all__ = ["CapabilityTokenCodec", "format_expiry", "parse_expiry"]
