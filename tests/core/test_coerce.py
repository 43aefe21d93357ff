"""
Tests for SQLite <-> PostgreSQL type coercion.
"""

import uuid

import pytest

from localbase.coerce import (
    coerce_filter_value,
    generate_uuid,
    parse_document,
    to_logical,
    to_storage,
)
from localbase.schema import build_schema


class TestBooleanColumns:
    """INTEGER 0/1 <-> true/false for declared boolean columns."""

    def test_to_logical_one_is_true(self):
        row = to_logical("people", {"id": "p1", "is_living": 1, "is_patrilineal": 0})
        assert row["is_living"] is True
        assert row["is_patrilineal"] is False

    def test_to_logical_null_is_false(self):
        assert to_logical("people", {"is_living": None})["is_living"] is False

    def test_to_logical_accepts_true(self):
        assert to_logical("events", {"recurring": True})["recurring"] is True

    def test_to_storage(self):
        data = to_storage("people", {"is_living": True, "is_patrilineal": False})
        assert data == {"is_living": 1, "is_patrilineal": 0}

    @pytest.mark.parametrize("stored", [0, 1])
    def test_storage_round_trip(self, stored):
        logical = to_logical("media", {"is_primary": stored})
        assert to_storage("media", logical) == {"is_primary": stored}

    @pytest.mark.parametrize("flag", [True, False])
    def test_logical_round_trip(self, flag):
        stored = to_storage("cau_duong_pools", {"is_active": flag})
        assert to_logical("cau_duong_pools", stored)["is_active"] is flag

    def test_same_column_name_other_table_untouched(self):
        # is_featured is boolean on achievements, not on people
        assert to_logical("people", {"is_featured": 1}) == {"is_featured": 1}


class TestDocumentColumns:
    """JSONB <-> TEXT for contributions.changes."""

    def test_parses_json_text(self):
        row = to_logical("contributions", {"changes": '{"display_name":"An","generation":2}'})
        assert row["changes"] == {"display_name": "An", "generation": 2}

    def test_invalid_json_passes_through(self):
        row = to_logical("contributions", {"changes": "sửa tên"})
        assert row["changes"] == "sửa tên"

    def test_null_passes_through(self):
        assert to_logical("contributions", {"changes": None}) == {"changes": None}

    def test_serializes_dict_and_list(self):
        data = to_storage("contributions", {"changes": {"tên": "Bình"}})
        assert data["changes"] == '{"tên":"Bình"}'
        assert to_storage("contributions", {"changes": [1, 2]})["changes"] == "[1,2]"

    def test_preserialized_string_written_as_is(self):
        data = to_storage("contributions", {"changes": '{"a":1}'})
        assert data["changes"] == '{"a":1}'

    def test_document_round_trip(self):
        original = {"before": {"display_name": "A"}, "after": {"display_name": "B"}, "fields": ["x"]}
        stored = to_storage("contributions", {"changes": original})
        assert to_logical("contributions", stored)["changes"] == original

    def test_parse_document_reports_fallback(self):
        parsed = parse_document("not json")
        assert parsed.ok is False
        assert parsed.value == "not json"
        assert parse_document("[1]").ok is True


class TestPassThrough:
    def test_unknown_table_unchanged(self):
        row = {"id": "x", "flag": 1, "payload": "{}"}
        assert to_logical("unknown_table", row) == row
        assert to_storage("unknown_table", row) == row

    def test_returns_new_dict(self):
        row = {"is_living": 1}
        to_logical("people", row)
        assert row == {"is_living": 1}


class TestFilterValues:
    def test_booleans_become_integers(self):
        assert coerce_filter_value("people", "is_living", True) == 1
        assert coerce_filter_value("people", "is_living", False) == 0

    def test_non_boolean_column_untouched(self):
        assert coerce_filter_value("people", "display_name", True) is True

    def test_custom_schema(self):
        schema = build_schema({"things": {"enabled"}}, {}, set())
        assert coerce_filter_value("things", "enabled", True, schema) == 1
        assert coerce_filter_value("people", "is_living", True, schema) is True


class TestGenerateUuid:
    def test_valid_and_unique(self):
        first, second = generate_uuid(), generate_uuid()
        assert uuid.UUID(first).version == 4
        assert first != second
