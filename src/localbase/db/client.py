"""
Localbase - Supabase-compatible client.

Desktop-mode stand-in for supabase.Client. Application code keeps
writing

    client.table("people").select("*").eq("is_living", True).order("generation").execute()

and gets the same {data, error} response, served from SQLite.
"""

import logging
import sqlite3
from typing import Any, Iterable

from localbase.config import settings
from localbase.db.adapter import DatabaseAdapter
from localbase.db.connection import open_connection
from localbase.executor import execute
from localbase.filters import (
    EqFilter,
    Filter,
    IlikeFilter,
    InFilter,
    IsFilter,
    NotFilter,
    OrFilter,
)
from localbase.models import OrderSpec, QueryRequest, QueryResult
from localbase.rpc import invoke
from localbase.schema import DEFAULT_SCHEMA, SchemaMetadata

logger = logging.getLogger(__name__)


class QueryBuilder:
    """
    Fluent builder for one table query. Every modifier returns self.

    Mirrors supabase-py: .select() starts a read, or, chained after
    .insert()/.update(), asks for the written rows back.
    """

    def __init__(self, client: "LocalClient", table: str):
        self._client = client
        self._table = table
        self._method: str | None = None
        self._columns: str | None = None
        self._body: dict[str, Any] | list[dict[str, Any]] | None = None
        self._filters: list[Filter] = []
        self._order: list[OrderSpec] = []
        self._limit: int | None = None
        self._single = False
        self._maybe_single = False

    # -------------------------------------------------------------------------
    # Methods
    # -------------------------------------------------------------------------

    def select(self, columns: str = "*") -> "QueryBuilder":
        if self._method is None:
            self._method = "select"
        self._columns = columns
        return self

    def insert(self, body: dict[str, Any] | list[dict[str, Any]]) -> "QueryBuilder":
        self._method = "insert"
        self._body = body
        return self

    def update(self, body: dict[str, Any]) -> "QueryBuilder":
        self._method = "update"
        self._body = body
        return self

    def delete(self) -> "QueryBuilder":
        self._method = "delete"
        return self

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        self._filters.append(EqFilter(column=column, value=value))
        return self

    def neq(self, column: str, value: Any) -> "QueryBuilder":
        self._filters.append(NotFilter(column=column, operator="neq", value=value))
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "QueryBuilder":
        self._filters.append(InFilter(column=column, value=list(values)))
        return self

    def is_(self, column: str, value: Any = None) -> "QueryBuilder":
        self._filters.append(IsFilter(column=column, value=value))
        return self

    def ilike(self, column: str, pattern: str) -> "QueryBuilder":
        self._filters.append(IlikeFilter(column=column, value=pattern))
        return self

    def not_(self, column: str, operator: str, value: Any = None) -> "QueryBuilder":
        self._filters.append(NotFilter(column=column, operator=operator, value=value))
        return self

    def or_(self, condition: str) -> "QueryBuilder":
        self._filters.append(OrFilter(condition=condition))
        return self

    # -------------------------------------------------------------------------
    # Modifiers
    # -------------------------------------------------------------------------

    def order(self, column: str, *, desc: bool = False) -> "QueryBuilder":
        self._order.append(OrderSpec(column=column, ascending=not desc))
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self._limit = count
        return self

    def single(self) -> "QueryBuilder":
        self._single = True
        return self

    def maybe_single(self) -> "QueryBuilder":
        self._maybe_single = True
        return self

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def to_payload(self) -> dict[str, Any]:
        """The JSON payload a desktop transport would carry for this query."""
        return {
            "table": self._table,
            "method": self._method,
            "columns": self._columns,
            "body": self._body,
            "filters": self._filters,
            "order": self._order,
            "limit": self._limit,
            "single": self._single,
            "maybe_single": self._maybe_single,
        }

    def to_request(self) -> QueryRequest:
        """Validated request. Raises pydantic.ValidationError on a malformed query."""
        return QueryRequest.model_validate(self.to_payload())

    def execute(self) -> QueryResult:
        return execute(self._client.connection, self.to_payload(), self._client.schema)


class RpcCall:
    """Pending supabase.rpc() call."""

    def __init__(self, client: "LocalClient", function_name: str, params: dict[str, Any]):
        self._client = client
        self.function_name = function_name
        self.params = params

    def execute(self) -> QueryResult:
        return invoke(self._client.connection, self.function_name, self.params)


class LocalClient(DatabaseAdapter):
    """
    SQLite-backed DatabaseAdapter.

    Holds one connection; the app is assumed to issue one request at a
    time, so no locking is done here.
    """

    def __init__(self, connection: sqlite3.Connection, schema: SchemaMetadata = DEFAULT_SCHEMA):
        self.connection = connection
        self.schema = schema

    def table(self, name: str) -> QueryBuilder:
        return QueryBuilder(self, name)

    def from_(self, name: str) -> QueryBuilder:
        return self.table(name)

    def rpc(self, function_name: str, params: dict | None = None) -> RpcCall:
        return RpcCall(self, function_name, params or {})

    def close(self) -> None:
        self.connection.close()


# Singleton client instance
_client: LocalClient | None = None


def get_client() -> LocalClient:
    """
    Get the desktop client.

    Uses singleton pattern to reuse the SQLite connection.
    """
    global _client

    if _client is None:
        _client = LocalClient(open_connection(settings.localbase_db_path))
        logger.info("Desktop database: %s", settings.localbase_db_path)

    return _client
