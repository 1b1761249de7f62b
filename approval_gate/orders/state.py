"""Tag-driven workflow state.

The Shopify tag set is the only persisted state. Tag strings are handled
here and at the client boundary; everything else works on WorkflowState.

    NONE --queue--> PENDING --approve--> SENT
                            --reject---> REJECTED

SENT and REJECTED are terminal. PENDING is removed whenever a terminal tag
is added, so a tag set never holds both.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

TAG_PENDING = "MO:PENDING"
TAG_SENT = "MO:SENT"
TAG_REJECTED = "MO:REJECTED"


class WorkflowState(str, Enum):
    NONE = "none"
    PENDING = "pending"
    SENT = "sent"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkflowState.SENT, WorkflowState.REJECTED)


class Action(str, Enum):
    QUEUE = "queue"
    APPROVE = "approve"
    REJECT = "reject"


_TARGET_TAG = {
    Action.QUEUE: TAG_PENDING,
    Action.APPROVE: TAG_SENT,
    Action.REJECT: TAG_REJECTED,
}


def parse_tags(raw: Any) -> list[str]:
    """Split Shopify's comma-separated tag string (or list) into clean tags."""
    if raw is None:
        return []
    items = raw if isinstance(raw, (list, tuple)) else str(raw).split(",")
    tags: list[str] = []
    for item in items:
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def format_tags(tags: list[str]) -> str:
    return ", ".join(tags)


def derive_state(tags: list[str] | set[str]) -> WorkflowState:
    """Map a tag set to its workflow state. Terminal tags win over PENDING."""
    if TAG_SENT in tags:
        return WorkflowState.SENT
    if TAG_REJECTED in tags:
        return WorkflowState.REJECTED
    if TAG_PENDING in tags:
        return WorkflowState.PENDING
    return WorkflowState.NONE


def next_tags(current: list[str], action: Action, reopen_terminal: bool = False) -> list[str]:
    """Pure transition: the tag list after applying action to current.

    Unrelated tags keep their order. Terminal states absorb every action
    (the input is returned unchanged) unless reopen_terminal is set for
    QUEUE, in which case terminal tags are dropped and PENDING is added.
    """
    tags = parse_tags(current)
    state = derive_state(tags)

    if state.is_terminal:
        if action is Action.QUEUE and reopen_terminal:
            tags = [t for t in tags if t not in (TAG_SENT, TAG_REJECTED)]
            return tags if TAG_PENDING in tags else tags + [TAG_PENDING]
        return tags

    target = _TARGET_TAG[action]
    if action is not Action.QUEUE:
        tags = [t for t in tags if t != TAG_PENDING]
    if target not in tags:
        tags.append(target)
    return tags
