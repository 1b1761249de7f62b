"""Typed view of the Shopify order JSON used by the approval workflow.

Nothing here is persisted; every read re-fetches the order from Shopify.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from approval_gate.orders.state import parse_tags

# Line item property that flags a custom print job
PRINT_MARKER = "mo_print"
_TRUTHY = {"true", "1", "yes", "on"}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class LineItem:
    """One order line: own SKU, quantity, and the storefront property bag."""

    sku: str = ""
    quantity: int = 1
    price: str = ""
    title: str = ""
    properties: dict[str, str] = field(default_factory=dict)

    @property
    def is_print_job(self) -> bool:
        return self.properties.get(PRINT_MARKER, "").strip().lower() in _TRUTHY

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "LineItem":
        props: dict[str, str] = {}
        raw_props = data.get("properties") or []
        if isinstance(raw_props, dict):
            props = {str(k): _text(v) for k, v in raw_props.items()}
        else:
            for prop in raw_props:
                if isinstance(prop, dict) and prop.get("name"):
                    props[str(prop["name"])] = _text(prop.get("value"))
        try:
            quantity = int(data.get("quantity") or 0)
        except (TypeError, ValueError):
            quantity = 0
        return cls(
            sku=_text(data.get("sku")),
            quantity=quantity,
            price=_text(data.get("price")),
            title=_text(data.get("title")),
            properties=props,
        )


@dataclass
class ShippingAddress:
    name: str = ""
    company: str = ""
    address1: str = ""
    address2: str = ""
    zip: str = ""
    city: str = ""
    province: str = ""
    country_code: str = ""
    phone: str = ""

    @classmethod
    def from_payload(cls, data: dict[str, Any] | None) -> "ShippingAddress":
        data = data or {}
        return cls(**{name: _text(data.get(name)) for name in cls.__dataclass_fields__})


@dataclass
class Order:
    """A Shopify order as far as the approval workflow cares."""

    id: int
    name: str = ""
    order_number: str = ""
    email: str = ""
    currency: str = ""
    created_at: str = ""
    tags: list[str] = field(default_factory=list)
    line_items: list[LineItem] = field(default_factory=list)
    shipping_address: ShippingAddress = field(default_factory=ShippingAddress)

    @property
    def has_print_job(self) -> bool:
        return any(li.is_print_job for li in self.line_items)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "Order":
        """Build from a Shopify order object. Raises ValueError without a usable id."""
        order_id = int(data["id"])
        return cls(
            id=order_id,
            name=_text(data.get("name")),
            order_number=_text(data.get("order_number")),
            email=_text(data.get("email")),
            currency=_text(data.get("currency")),
            created_at=_text(data.get("created_at")),
            tags=parse_tags(data.get("tags")),
            line_items=[LineItem.from_payload(li) for li in data.get("line_items") or []],
            shipping_address=ShippingAddress.from_payload(data.get("shipping_address")),
        )
