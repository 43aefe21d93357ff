"""
Tests for schema metadata and DDL.
"""

import dataclasses

import pytest

from localbase.schema import (
    DEFAULT_SCHEMA,
    TABLE_DDL,
    UPDATED_AT_TABLES,
    TableSchema,
    create_tables,
)


class TestDefaultSchema:
    def test_boolean_columns(self):
        assert DEFAULT_SCHEMA.is_boolean_column("people", "is_living")
        assert DEFAULT_SCHEMA.is_boolean_column("cau_duong_pools", "is_active")
        assert not DEFAULT_SCHEMA.is_boolean_column("people", "display_name")
        assert not DEFAULT_SCHEMA.is_boolean_column("people", None)

    def test_document_columns(self):
        assert DEFAULT_SCHEMA.is_document_column("contributions", "changes")
        assert not DEFAULT_SCHEMA.is_document_column("people", "notes")

    def test_updated_at_tables(self):
        for table in UPDATED_AT_TABLES:
            assert DEFAULT_SCHEMA.tracks_updated_at(table)
        assert not DEFAULT_SCHEMA.tracks_updated_at("children")
        assert not DEFAULT_SCHEMA.tracks_updated_at("events")

    def test_unknown_table_is_plain(self):
        assert DEFAULT_SCHEMA.table("nope") == TableSchema()


class TestImmutability:
    def test_mapping_is_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_SCHEMA.tables["people"] = TableSchema()

    def test_table_schema_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_SCHEMA.table("people").tracks_updated_at = False


class TestDDL:
    def test_create_tables_idempotent(self, connection):
        assert create_tables(connection) == list(TABLE_DDL)
        names = {
            row[0]
            for row in connection.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        assert set(TABLE_DDL) <= names

    def test_updated_at_tables_have_column(self, connection):
        for table in UPDATED_AT_TABLES:
            columns = {row[1] for row in connection.execute(f"PRAGMA table_info({table})")}
            assert "updated_at" in columns, table

    def test_boolean_columns_exist(self, connection):
        for table, meta in DEFAULT_SCHEMA.tables.items():
            columns = {row[1] for row in connection.execute(f"PRAGMA table_info({table})")}
            assert meta.boolean_columns <= columns, table
            assert meta.document_columns <= columns, table
