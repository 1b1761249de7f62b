"""Action request parameters.

Approve/reject links may carry id/token/expires in the query string, a
form body, or a JSON body. Sources are merged in a fixed order; later
sources override earlier ones:

    query string  <  form body  <  JSON body

This matches the listing page, which posts hidden form fields to a bare
action URL.
"""

from __future__ import annotations

import json
from typing import Any, Mapping
from urllib.parse import parse_qsl

from pydantic import BaseModel, Field, ValidationError

from approval_gate.errors import MalformedInput


class ActionParams(BaseModel):
    id: int = Field(gt=0)
    token: str = Field(min_length=1)
    expires: str = Field(min_length=1)


def merge_params(*sources: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge parameter sources left to right; later sources win."""
    merged: dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            if value is None:
                continue
            merged[key] = value
    return merged


def parse_body(content_type: str, body: bytes) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split a request body into (form, json) parameter dicts.

    Unparsable bodies contribute nothing; validation reports what is missing.
    """
    content_type = (content_type or "").lower()
    if not body:
        return {}, {}
    if "application/x-www-form-urlencoded" in content_type:
        try:
            return dict(parse_qsl(body.decode("utf-8"), keep_blank_values=True)), {}
        except UnicodeDecodeError:
            return {}, {}
    if "application/json" in content_type:
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return {}, {}
        return {}, data if isinstance(data, dict) else {}
    return {}, {}


def parse_action_params(
    query: Mapping[str, Any] | None,
    form: Mapping[str, Any] | None = None,
    body: Mapping[str, Any] | None = None,
) -> ActionParams:
    merged = merge_params(query, form, body)
    try:
        return ActionParams.model_validate(merged)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise MalformedInput(f"Missing or invalid {'/'.join(fields) or 'parameters'}") from e
