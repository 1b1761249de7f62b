"""Tests for action parameter merging and validation (no HTTP layer)."""

from __future__ import annotations

import pytest

from approval_gate.errors import MalformedInput
from approval_gate.web.params import merge_params, parse_action_params, parse_body


class TestMergeParams:
    def test_later_sources_win(self):
        merged = merge_params({"id": "1", "token": "q"}, {"token": "f"}, {"token": "j"})
        assert merged == {"id": "1", "token": "j"}

    def test_none_sources_and_values_skipped(self):
        assert merge_params(None, {"id": "1", "token": None}, {}) == {"id": "1"}

    def test_form_overrides_query(self):
        merged = merge_params({"expires": "q"}, {"expires": "f"})
        assert merged["expires"] == "f"


class TestParseBody:
    def test_form(self):
        form, body = parse_body("application/x-www-form-urlencoded", b"id=500&token=abc&expires=2024-07-03T12%3A00%3A00Z")
        assert form == {"id": "500", "token": "abc", "expires": "2024-07-03T12:00:00Z"}
        assert body == {}

    def test_json(self):
        form, body = parse_body("application/json; charset=utf-8", b'{"id": 500, "token": "abc"}')
        assert form == {}
        assert body == {"id": 500, "token": "abc"}

    def test_invalid_json_contributes_nothing(self):
        assert parse_body("application/json", b"{nope") == ({}, {})

    def test_json_array_ignored(self):
        assert parse_body("application/json", b"[1, 2]") == ({}, {})

    def test_unknown_content_type(self):
        assert parse_body("text/plain", b"id=1") == ({}, {})

    def test_empty_body(self):
        assert parse_body("application/json", b"") == ({}, {})


class TestParseActionParams:
    def test_query_only(self):
        params = parse_action_params({"id": "500", "token": "t", "expires": "e"})
        assert (params.id, params.token, params.expires) == (500, "t", "e")

    def test_json_overrides_query(self):
        params = parse_action_params({"id": "1", "token": "q", "expires": "e"}, {}, {"id": 500, "token": "j"})
        assert params.id == 500
        assert params.token == "j"
        assert params.expires == "e"

    def test_sources_combine(self):
        params = parse_action_params({"id": "500"}, {"token": "t"}, {"expires": "e"})
        assert (params.id, params.token, params.expires) == (500, "t", "e")

    @pytest.mark.parametrize(
        "query",
        [
            {"token": "t", "expires": "e"},
            {"id": "500", "expires": "e"},
            {"id": "500", "token": "t"},
            {"id": "500", "token": "", "expires": "e"},
            {"id": "abc", "token": "t", "expires": "e"},
            {"id": "0", "token": "t", "expires": "e"},
        ],
    )
    def test_missing_or_invalid_fields(self, query):
        with pytest.raises(MalformedInput):
            parse_action_params(query)

    def test_error_names_fields(self):
        with pytest.raises(MalformedInput, match="expires/token"):
            parse_action_params({"id": "500"})
