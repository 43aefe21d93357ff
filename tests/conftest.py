"""
Pytest configuration and fixtures for Localbase tests.

Every test gets its own in-memory SQLite database with the desktop
tables created, so tests never share state.
"""

import os
import sqlite3

import pytest

# Set test environment before importing localbase modules
os.environ["LOCALBASE_ENV"] = "development"
os.environ["LOCALBASE_DB_PATH"] = ":memory:"

from localbase.db.client import LocalClient
from localbase.db.connection import open_connection
from localbase.schema import create_tables


@pytest.fixture
def connection():
    """Disposable in-memory database with all desktop tables."""
    conn = open_connection(":memory:")
    create_tables(conn)
    yield conn
    conn.close()


@pytest.fixture
def client(connection):
    """LocalClient over the per-test database."""
    return LocalClient(connection)


def add_person(conn: sqlite3.Connection, person_id: str, name: str | None = None, **fields) -> None:
    row = {"id": person_id, "display_name": name or person_id, **fields}
    columns = ", ".join(row)
    placeholders = ", ".join("?" for _ in row)
    conn.execute(f"INSERT INTO people ({columns}) VALUES ({placeholders})", list(row.values()))


def add_family(
    conn: sqlite3.Connection,
    family_id: str,
    father_id: str | None = None,
    mother_id: str | None = None,
    children: list[str] | None = None,
) -> None:
    conn.execute(
        "INSERT INTO families (id, father_id, mother_id) VALUES (?, ?, ?)",
        (family_id, father_id, mother_id),
    )
    for i, child_id in enumerate(children or []):
        conn.execute(
            "INSERT INTO children (id, family_id, person_id, sort_order) VALUES (?, ?, ?, ?)",
            (f"{family_id}-c{i}", family_id, child_id, i),
        )


@pytest.fixture
def family_tree(connection):
    """
    Three generations:

        P1 ── F1 ──> P2, P3
        P2 ── F2 ──> P4
        P5 (unrelated)
    """
    for pid in ("P1", "P2", "P3", "P4", "P5"):
        add_person(connection, pid)
    add_family(connection, "F1", father_id="P1", children=["P2", "P3"])
    add_family(connection, "F2", father_id="P2", children=["P4"])
    return connection


@pytest.fixture
def sample_people(connection):
    """People rows covering booleans, Unicode names and nulls."""
    people = [
        {"id": "p-1", "display_name": "Nguyễn Văn An", "generation": 1, "is_living": 0, "birth_year": 1920},
        {"id": "p-2", "display_name": "Nguyễn Thị Bình", "generation": 2, "is_living": 1, "birth_year": 1950},
        {"id": "p-3", "display_name": "ĐẶNG VĂN CƯỜNG", "generation": 2, "is_living": 1, "birth_year": None},
        {"id": "p-4", "display_name": "Trần Minh", "generation": 3, "is_living": 1, "birth_year": 1985},
    ]
    for person in people:
        add_person(connection, person.pop("id"), person.pop("display_name"), **person)
    return connection


class TreeBuilder:
    """Helper for tests that need a custom family graph."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def person(self, person_id: str, name: str | None = None, **fields) -> "TreeBuilder":
        add_person(self.conn, person_id, name, **fields)
        return self

    def family(self, family_id: str, father_id=None, mother_id=None, children=None) -> "TreeBuilder":
        add_family(self.conn, family_id, father_id, mother_id, children)
        return self


@pytest.fixture
def tree(connection):
    return TreeBuilder(connection)
