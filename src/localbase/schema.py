"""
Localbase - Schema Metadata.

Provides:
- TableSchema: Logical types the SQLite storage cannot express
- SchemaMetadata: Read-only table -> TableSchema mapping
- DEFAULT_SCHEMA: The compiled-in desktop database metadata
- TABLE_DDL / create_tables: SQLite DDL for the desktop database

PostgreSQL has BOOLEAN and JSONB; SQLite stores them as INTEGER 0/1 and
TEXT. Both the filter builder and the query executor read the same
SchemaMetadata instance so they never disagree on a column's type.
"""

import sqlite3
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class TableSchema:
    """
    Logical column types for one table.

    Attributes:
        boolean_columns: BOOLEAN in PostgreSQL, INTEGER 0/1 in SQLite
        document_columns: JSONB in PostgreSQL, TEXT in SQLite
        tracks_updated_at: Table has an auto-maintained updated_at column
    """

    boolean_columns: frozenset[str] = frozenset()
    document_columns: frozenset[str] = frozenset()
    tracks_updated_at: bool = False


_EMPTY_TABLE = TableSchema()


@dataclass(frozen=True)
class SchemaMetadata:
    """Immutable table -> TableSchema mapping. Unknown tables have no special columns."""

    tables: Mapping[str, TableSchema] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", MappingProxyType(dict(self.tables)))

    def table(self, name: str) -> TableSchema:
        return self.tables.get(name, _EMPTY_TABLE)

    def is_boolean_column(self, table: str, column: str | None) -> bool:
        return column is not None and column in self.table(table).boolean_columns

    def is_document_column(self, table: str, column: str | None) -> bool:
        return column is not None and column in self.table(table).document_columns

    def tracks_updated_at(self, table: str) -> bool:
        return self.table(table).tracks_updated_at


def build_schema(
    boolean_columns: Mapping[str, set[str]],
    document_columns: Mapping[str, set[str]],
    updated_at_tables: set[str],
) -> SchemaMetadata:
    """Assemble SchemaMetadata from per-concern column listings."""
    names = set(boolean_columns) | set(document_columns) | set(updated_at_tables)
    return SchemaMetadata(
        tables={
            name: TableSchema(
                boolean_columns=frozenset(boolean_columns.get(name, ())),
                document_columns=frozenset(document_columns.get(name, ())),
                tracks_updated_at=name in updated_at_tables,
            )
            for name in names
        }
    )


# =============================================================================
# Desktop Database Metadata
# =============================================================================

BOOLEAN_COLUMNS: dict[str, set[str]] = {
    "people": {"is_living", "is_patrilineal"},
    "events": {"recurring"},
    "media": {"is_primary"},
    "achievements": {"is_featured"},
    "clan_articles": {"is_featured"},
    "cau_duong_pools": {"is_active"},
}

DOCUMENT_COLUMNS: dict[str, set[str]] = {
    "contributions": {"changes"},
}

UPDATED_AT_TABLES: set[str] = {
    "people",
    "families",
    "profiles",
    "achievements",
    "clan_articles",
    "cau_duong_pools",
    "cau_duong_assignments",
}

DEFAULT_SCHEMA = build_schema(BOOLEAN_COLUMNS, DOCUMENT_COLUMNS, UPDATED_AT_TABLES)


# =============================================================================
# SQLite DDL
# =============================================================================

# Column order follows the PostgreSQL migrations; UUIDs are TEXT,
# timestamps are ISO-8601 TEXT.
TABLE_DDL: dict[str, str] = {
    "profiles": """
        CREATE TABLE IF NOT EXISTS profiles (
            id TEXT PRIMARY KEY,
            email TEXT UNIQUE,
            full_name TEXT,
            role TEXT NOT NULL DEFAULT 'viewer',
            created_at TEXT,
            updated_at TEXT
        )""",
    "people": """
        CREATE TABLE IF NOT EXISTS people (
            id TEXT PRIMARY KEY,
            handle TEXT UNIQUE,
            display_name TEXT NOT NULL,
            gender INTEGER,
            generation INTEGER,
            birth_year INTEGER,
            death_year INTEGER,
            is_living INTEGER NOT NULL DEFAULT 1,
            is_patrilineal INTEGER NOT NULL DEFAULT 1,
            notes TEXT,
            created_at TEXT,
            updated_at TEXT
        )""",
    "families": """
        CREATE TABLE IF NOT EXISTS families (
            id TEXT PRIMARY KEY,
            father_id TEXT REFERENCES people(id) ON DELETE SET NULL,
            mother_id TEXT REFERENCES people(id) ON DELETE SET NULL,
            marriage_date TEXT,
            notes TEXT,
            created_at TEXT,
            updated_at TEXT
        )""",
    "children": """
        CREATE TABLE IF NOT EXISTS children (
            id TEXT PRIMARY KEY,
            family_id TEXT NOT NULL REFERENCES families(id) ON DELETE CASCADE,
            person_id TEXT NOT NULL REFERENCES people(id) ON DELETE CASCADE,
            sort_order INTEGER DEFAULT 0,
            created_at TEXT,
            UNIQUE (family_id, person_id)
        )""",
    "events": """
        CREATE TABLE IF NOT EXISTS events (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            event_date TEXT,
            person_id TEXT REFERENCES people(id) ON DELETE CASCADE,
            recurring INTEGER NOT NULL DEFAULT 0,
            created_at TEXT
        )""",
    "media": """
        CREATE TABLE IF NOT EXISTS media (
            id TEXT PRIMARY KEY,
            person_id TEXT REFERENCES people(id) ON DELETE CASCADE,
            url TEXT NOT NULL,
            caption TEXT,
            is_primary INTEGER NOT NULL DEFAULT 0,
            created_at TEXT
        )""",
    "achievements": """
        CREATE TABLE IF NOT EXISTS achievements (
            id TEXT PRIMARY KEY,
            person_id TEXT REFERENCES people(id) ON DELETE CASCADE,
            title TEXT NOT NULL,
            description TEXT,
            year INTEGER,
            is_featured INTEGER NOT NULL DEFAULT 0,
            created_at TEXT,
            updated_at TEXT
        )""",
    "clan_articles": """
        CREATE TABLE IF NOT EXISTS clan_articles (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            content TEXT,
            category TEXT,
            is_featured INTEGER NOT NULL DEFAULT 0,
            created_at TEXT,
            updated_at TEXT
        )""",
    "contributions": """
        CREATE TABLE IF NOT EXISTS contributions (
            id TEXT PRIMARY KEY,
            author_id TEXT,
            target_person TEXT,
            change_type TEXT NOT NULL,
            changes TEXT,
            status TEXT NOT NULL DEFAULT 'pending',
            created_at TEXT
        )""",
    "cau_duong_pools": """
        CREATE TABLE IF NOT EXISTS cau_duong_pools (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT,
            updated_at TEXT
        )""",
    "cau_duong_assignments": """
        CREATE TABLE IF NOT EXISTS cau_duong_assignments (
            id TEXT PRIMARY KEY,
            pool_id TEXT NOT NULL REFERENCES cau_duong_pools(id) ON DELETE CASCADE,
            person_id TEXT NOT NULL REFERENCES people(id) ON DELETE CASCADE,
            year INTEGER NOT NULL,
            status TEXT NOT NULL DEFAULT 'scheduled',
            created_at TEXT,
            updated_at TEXT,
            UNIQUE (pool_id, year)
        )""",
}


def create_tables(connection: sqlite3.Connection) -> list[str]:
    """
    Create all desktop tables that don't exist yet.

    Returns:
        Table names in creation order
    """
    with connection:
        for ddl in TABLE_DDL.values():
            connection.execute(ddl)
    return list(TABLE_DDL)
