"""Minimal HTML for the reviewer: the pending table and action results."""

from __future__ import annotations

from html import escape

from approval_gate.orders.coordinator import ActionResult, Outcome, PendingOrder
from approval_gate.orders.transform import supplier_code_from_sku

APPROVE_PATH = "/admin/approve"
REJECT_PATH = "/admin/reject"

_STYLE = "font-family:Arial,sans-serif"


def _page(title: str, body: str) -> str:
    return (
        f'<html><head><meta charset="utf-8"><title>{escape(title)}</title></head>'
        f'<body style="{_STYLE}">{body}</body></html>'
    )


def _action_form(path: str, label: str, entry: PendingOrder, style: str = "") -> str:
    return (
        f'<form method="POST" action="{path}" style="display:inline;{style}">'
        f'<input type="hidden" name="id" value="{entry.order.id}">'
        f'<input type="hidden" name="token" value="{escape(entry.token)}">'
        f'<input type="hidden" name="expires" value="{escape(entry.expires)}">'
        f"<button>{label}</button></form>"
    )


def _row(entry: PendingOrder) -> str:
    order = entry.order
    items = "<br>".join(
        f"{escape(li.title)} — <b>{escape(li.sku)}</b> "
        f"({escape(supplier_code_from_sku(li.sku))}) × {li.quantity}"
        for li in order.line_items
    )
    actions = _action_form(APPROVE_PATH, "Approve", entry) + _action_form(
        REJECT_PATH, "Reject", entry, style="margin-left:6px;"
    )
    return (
        f"<tr><td>{escape(order.name)}</td><td>{escape(order.created_at)}</td>"
        f"<td>{escape(order.email)}</td><td>{items or '-'}</td>"
        f'<td style="white-space:nowrap;">{actions}</td></tr>'
    )


def render_pending(entries: list[PendingOrder]) -> str:
    rows = "".join(_row(e) for e in entries) or '<tr><td colspan="5">No pending orders.</td></tr>'
    table = (
        "<h2>Pending review orders</h2>"
        '<table cellpadding="6" cellspacing="0" border="1" style="border-collapse:collapse">'
        "<thead><tr><th>Order</th><th>Created</th><th>Email</th>"
        "<th>Items (Own SKU → Supplier)</th><th>Actions</th></tr></thead>"
        f"<tbody>{rows}</tbody></table>"
    )
    return _page("Pending review", table)


def render_result(result: ActionResult) -> str:
    name = escape(result.order_name or f"#{result.order_id}")
    if result.outcome is Outcome.SENT:
        message = f"Sent to Midocean. Ref: <b>{escape(result.vendor_reference)}</b>"
        if not result.annotation_saved:
            message += "<br>Shopify tags could not be updated; do not resend."
    elif result.outcome is Outcome.REJECTED:
        message = "Marked as REJECTED. Nothing sent to Midocean."
    else:
        message = f"Already processed ({escape(result.state.value.upper())}). Nothing changed."
    return _page(f"Order {name}", f"<h3>{name}</h3><p>{message}</p>")


def render_error(message: str, detail: str = "") -> str:
    body = f"<p>{escape(message)}</p>"
    if detail:
        body += f"<pre>{escape(detail)}</pre>"
    return _page("Error", body)
