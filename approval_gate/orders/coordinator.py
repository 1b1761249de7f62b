"""Order state coordinator: webhook intake, pending listing, approve/reject.

Failure contract:
- Everything before the Midocean call is a hard failure: bad token, missing
  order, Shopify read error, vendor rejection -> raise, nothing written
- The tag/note write after a successful Midocean call is best effort: the
  vendor order exists and must not be duplicated by a retry, so a failed
  write is logged and the approval still reports success
- Terminal tags are re-checked right before any write; an order already
  SENT or REJECTED yields ALREADY_PROCESSED instead of a second transition
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from approval_gate.clients.midocean import REFERENCE_NOTE_ATTRIBUTE, MidoceanClient
from approval_gate.clients.shopify import ShopifyClient
from approval_gate.errors import AuthenticationFailure, MalformedInput, UpstreamFailure
from approval_gate.orders.models import Order
from approval_gate.orders.state import Action, WorkflowState, derive_state, format_tags, next_tags
from approval_gate.orders.transform import transform
from approval_gate.security.capability import CapabilityTokenCodec

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    SENT = "sent"
    REJECTED = "rejected"
    ALREADY_PROCESSED = "already_processed"


@dataclass
class ActionResult:
    """What an approve/reject call did."""

    order_id: int
    order_name: str
    outcome: Outcome
    state: WorkflowState
    vendor_reference: str = ""
    annotation_saved: bool = True


@dataclass
class IngestResult:
    order_id: int
    state: WorkflowState
    changed: bool


@dataclass
class PendingOrder:
    """A pending order plus the freshly minted link credentials."""

    order: Order
    expires: str
    token: str


class OrderCoordinator:
    def __init__(
        self,
        codec: CapabilityTokenCodec,
        shopify: ShopifyClient,
        midocean: MidoceanClient,
        page_size: int = 100,
        reopen_terminal_orders: bool = False,
    ):
        self.codec = codec
        self.shopify = shopify
        self.midocean = midocean
        self.page_size = page_size
        self.reopen_terminal_orders = reopen_terminal_orders

    # ── Webhook intake ────────────────────────────────────────────────

    def ingest_webhook(self, payload: dict[str, Any]) -> IngestResult:
        """Mark the order from a verified orders/create webhook as pending.

        Only the id is taken from the payload, which is a creation-time
        snapshot; tags are read fresh from Shopify. Writes only when the tag
        set actually changes.
        """
        try:
            order_id = int(payload["id"])
        except (KeyError, TypeError, ValueError):
            raise MalformedInput("Order id invalid")

        order = self.shopify.get_order(order_id)
        before = derive_state(order.tags)
        tags = next_tags(order.tags, Action.QUEUE, reopen_terminal=self.reopen_terminal_orders)
        if tags == order.tags:
            if before.is_terminal:
                logger.info("Webhook for order %s ignored: already %s", order.id, before.value)
            return IngestResult(order.id, before, changed=False)

        self.shopify.update_order(order.id, format_tags(tags))
        logger.info("Order %s (%s) queued for review", order.id, order.name)
        return IngestResult(order.id, derive_state(tags), changed=True)

    # ── Listing ───────────────────────────────────────────────────────

    def list_pending(self, now: datetime | None = None) -> list[PendingOrder]:
        now = now or datetime.now(timezone.utc)
        pending = []
        for order in self.shopify.list_recent_orders(self.page_size):
            if derive_state(order.tags) is not WorkflowState.PENDING:
                continue
            expires, token = self.codec.mint(order.id, now=now)
            pending.append(PendingOrder(order=order, expires=expires, token=token))
        return pending

    # ── Actions ───────────────────────────────────────────────────────

    def _authorize(self, order_id: int, token: str, expires: str) -> None:
        if not self.codec.verify(order_id, expires, token):
            logger.info("Rejected action on order %s: invalid or expired token", order_id)
            raise AuthenticationFailure("Invalid or expired token")

    def _already_processed(self, order: Order) -> ActionResult | None:
        state = derive_state(order.tags)
        if not state.is_terminal:
            return None
        logger.info("Order %s already %s, nothing to do", order.id, state.value)
        return ActionResult(order.id, order.name, Outcome.ALREADY_PROCESSED, state)

    def approve(self, order_id: int, token: str, expires: str) -> ActionResult:
        self._authorize(order_id, token, expires)
        order = self.shopify.get_order(order_id)
        done = self._already_processed(order)
        if done:
            return done

        payload = transform(order)
        reference = self.midocean.create_order(payload)
        logger.info("Order %s sent to Midocean (ref=%s)", order.id, reference or "-")

        tags = next_tags(order.tags, Action.APPROVE)
        annotation_saved = True
        try:
            self.shopify.update_order(
                order.id,
                format_tags(tags),
                note_attributes=[{"name": REFERENCE_NOTE_ATTRIBUTE, "value": reference}],
            )
        except UpstreamFailure as e:
            annotation_saved = False
            logger.warning(
                "Order %s sent to Midocean but tag update failed (HTTP %d)", order.id, e.status
            )
        except Exception:
            annotation_saved = False
            logger.warning("Order %s sent to Midocean but tag update failed", order.id, exc_info=True)

        return ActionResult(
            order.id,
            order.name,
            Outcome.SENT,
            WorkflowState.SENT,
            vendor_reference=reference,
            annotation_saved=annotation_saved,
        )

    def reject(self, order_id: int, token: str, expires: str) -> ActionResult:
        self._authorize(order_id, token, expires)
        order = self.shopify.get_order(order_id)
        done = self._already_processed(order)
        if done:
            return done

        tags = next_tags(order.tags, Action.REJECT)
        self.shopify.update_order(order.id, format_tags(tags))
        logger.info("Order %s rejected; nothing sent to Midocean", order.id)
        return ActionResult(order.id, order.name, Outcome.REJECTED, WorkflowState.REJECTED)
