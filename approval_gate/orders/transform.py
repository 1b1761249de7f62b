"""Shopify order -> Midocean create-order payload.

Line numbering: standard lines are numbered from 1 and print jobs from
PRINT_LINE_OFFSET, each in source order. Orders with more standard lines
than the offset would overlap the print band; the storefront caps carts
well below that.

Vendor codes: the storefront lists Midocean products under its own SKU,
which is the supplier code reversed plus a "-MID" suffix. The mapping is
self-inverse, so supplier_code_from_sku and own_sku_from_supplier_code
undo each other.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from approval_gate.orders.models import LineItem, Order

SUPPLIER_SUFFIX = "-MID"
PRINT_LINE_OFFSET = 10
STANDARD_LINE_OFFSET = 1
DEFAULT_CURRENCY = "EUR"
ORDER_TYPE_PRINT = "PRINT"
ORDER_TYPE_NORMAL = "NORMAL"

# property name -> default, for the single printing position
PRINT_POSITION_FIELDS = {
    "id": ("mo_position_id", "FRONT"),
    "print_size_height": ("mo_print_h", "20"),
    "print_size_width": ("mo_print_w", "50"),
    "printing_technique_id": ("mo_technique_id", "S2"),
    "number_of_print_colors": ("mo_colors", "1"),
    "print_artwork_url": ("mo_artwork_url", ""),
    "print_mockup_url": ("mo_mockup_url", ""),
    "print_instruction": ("mo_instruction", ""),
}


def supplier_code_from_sku(own_sku: str) -> str:
    """Recover the Midocean code: drop the -MID suffix, then reverse."""
    base = own_sku[: -len(SUPPLIER_SUFFIX)] if own_sku.endswith(SUPPLIER_SUFFIX) else own_sku
    return base[::-1]


def own_sku_from_supplier_code(supplier_code: str) -> str:
    return supplier_code[::-1] + SUPPLIER_SUFFIX


def _quantity(item: LineItem) -> str:
    return str(item.quantity or 1)


def _prop(item: LineItem, name: str, default: str) -> str:
    return item.properties.get(name) or default


def _print_line(item: LineItem, line_id: int) -> dict[str, Any]:
    master_code = item.properties.get("mo_master_code") or item.sku.split("-")[0]
    position = {key: _prop(item, prop, default) for key, (prop, default) in PRINT_POSITION_FIELDS.items()}
    return {
        "order_line_id": str(line_id),
        "master_code": master_code,
        "quantity": _quantity(item),
        "expected_price": "0",
        "printing_positions": [position],
        "print_items": [
            {
                "item_color_number": _prop(item, "mo_item_color_number", ""),
                "quantity": _quantity(item),
            }
        ],
    }


def _standard_line(item: LineItem, line_id: int) -> dict[str, Any]:
    return {
        "order_line_id": str(line_id),
        "sku": supplier_code_from_sku(item.sku),
        "quantity": _quantity(item),
        "expected_price": "0",
    }


def build_order_lines(order: Order) -> list[dict[str, Any]]:
    lines = []
    next_standard = STANDARD_LINE_OFFSET
    next_print = PRINT_LINE_OFFSET
    for item in order.line_items:
        if item.is_print_job:
            lines.append(_print_line(item, next_print))
            next_print += 1
        else:
            lines.append(_standard_line(item, next_standard))
            next_standard += 1
    return lines


def _shipping_address(order: Order) -> dict[str, str]:
    addr = order.shipping_address
    return {
        "contact_name": addr.name,
        "company_name": addr.company,
        "street1": f"{addr.address1} {addr.address2}".strip(),
        "postal_code": addr.zip,
        "city": addr.city,
        "region": addr.province,
        "country": addr.country_code,
        "email": order.email,
        "phone": addr.phone,
    }


def transform(order: Order, now: datetime | None = None) -> dict[str, Any]:
    """Build the Midocean order gateway payload for an order."""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return {
        "order_header": {
            "po_number": order.order_number or order.name or "",
            "contact_email": order.email,
            "currency": order.currency or DEFAULT_CURRENCY,
            "timestamp": moment.strftime("%Y-%m-%dT%H:%M:%S"),
            "order_type": ORDER_TYPE_PRINT if order.has_print_job else ORDER_TYPE_NORMAL,
            "shipping_address": _shipping_address(order),
        },
        "order_lines": build_order_lines(order),
    }
