"""
Localbase - Query Executor.

Translates a Supabase query request to SQL and executes it against
SQLite. Handles: select, insert, update, delete, filters, order, limit,
.single() / .maybe_single().

execute() never raises: every failure comes back in the error field of
the {data, error} result, the same as the Supabase client.
"""

import logging
import sqlite3
from collections.abc import Mapping
from contextlib import closing
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from localbase.coerce import generate_uuid, to_logical, to_storage
from localbase.db.connection import ensure_functions
from localbase.errors import (
    is_unique_violation,
    map_engine_error,
    not_found_error,
    unique_violation_error,
    unknown_method_error,
    validation_error,
)
from localbase.filters import build_where, quote_identifier
from localbase.models import METHODS, QueryRequest, QueryResult
from localbase.schema import DEFAULT_SCHEMA, SchemaMetadata

logger = logging.getLogger(__name__)

Row = dict[str, Any]


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string (same format as JS toISOString())."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =============================================================================
# Entry Point
# =============================================================================


def execute(
    connection: sqlite3.Connection,
    request: QueryRequest | Mapping[str, Any],
    schema: SchemaMetadata = DEFAULT_SCHEMA,
) -> QueryResult:
    """
    Execute one query request.

    Args:
        connection: Open SQLite connection
        request: QueryRequest, or the raw JSON payload of one
        schema: Table metadata used for type coercion

    Returns:
        QueryResult with data (row, list of rows, or None) or error
    """
    if not isinstance(request, QueryRequest):
        method = request.get("method")
        if method not in METHODS:
            return QueryResult.failure(unknown_method_error(method))
        try:
            request = QueryRequest.model_validate(request)
        except ValidationError as e:
            return QueryResult.failure(
                validation_error("Invalid query request", details=str(e))
            )

    try:
        ensure_functions(connection)
        match request.method:
            case "select":
                return _execute_select(connection, request, schema)
            case "insert":
                return _execute_insert(connection, request, schema)
            case "update":
                return _execute_update(connection, request, schema)
            case "delete":
                return _execute_delete(connection, request, schema)
            case _:
                return QueryResult.failure(unknown_method_error(request.method))
    except sqlite3.Error as e:
        if is_unique_violation(e):
            logger.info("Unique violation on %s: %s", request.table, e)
            return QueryResult.failure(unique_violation_error(str(e)))
        return QueryResult.failure(map_engine_error(e))
    except Exception as e:
        logger.exception("Unexpected error executing %s on %s", request.method, request.table)
        return QueryResult.failure(map_engine_error(e))


# =============================================================================
# Statement Helpers
# =============================================================================


def _projection(columns: str | None) -> str:
    """SELECT list for a .select() spec: "*" or "a, b, c"."""
    if not columns or columns.strip() == "*":
        return "*"
    names = [c.strip() for c in columns.split(",") if c.strip()]
    return ", ".join("*" if name == "*" else quote_identifier(name) for name in names)


def _fetch_rows(
    connection: sqlite3.Connection,
    sql: str,
    params: list[Any],
    table: str,
    schema: SchemaMetadata,
) -> list[Row]:
    """Run a SELECT and return coerced rows. The cursor is closed on every path."""
    logger.debug("SQL: %s | params=%r", sql, params)
    with closing(connection.cursor()) as cursor:
        cursor.execute(sql, params)
        names = [d[0] for d in cursor.description]
        return [to_logical(table, dict(zip(names, row)), schema) for row in cursor.fetchall()]


def _run(connection: sqlite3.Connection, sql: str, params: list[Any]) -> int:
    """Run a write statement and commit it. Returns the affected row count."""
    logger.debug("SQL: %s | params=%r", sql, params)
    with closing(connection.cursor()) as cursor:
        cursor.execute(sql, params)
        affected = cursor.rowcount
    if connection.in_transaction:
        connection.commit()
    return affected


def _apply_cardinality(request: QueryRequest, rows: list[Row]) -> QueryResult:
    """Apply .single() / .maybe_single() to a list of rows."""
    if request.single:
        if not rows:
            return QueryResult.failure(not_found_error())
        return QueryResult.success(rows[0])

    if request.maybe_single:
        return QueryResult.success(rows[0] if rows else None)

    return QueryResult.success(rows)


# =============================================================================
# Methods
# =============================================================================


def _execute_select(
    connection: sqlite3.Connection,
    request: QueryRequest,
    schema: SchemaMetadata,
) -> QueryResult:
    where = build_where(request.filters, request.table, schema)
    params = list(where.params)

    sql = f"SELECT {_projection(request.columns)} FROM {quote_identifier(request.table)}"
    if where.clause:
        sql += f" {where.clause}"

    if request.order:
        order_parts = [
            f"{quote_identifier(o.column)} {'ASC' if o.ascending else 'DESC'}"
            for o in request.order
        ]
        sql += f" ORDER BY {', '.join(order_parts)}"

    if request.limit:
        sql += " LIMIT ?"
        params.append(request.limit)

    rows = _fetch_rows(connection, sql, params, request.table, schema)
    return _apply_cardinality(request, rows)


def _execute_insert(
    connection: sqlite3.Connection,
    request: QueryRequest,
    schema: SchemaMetadata,
) -> QueryResult:
    table = quote_identifier(request.table)
    inserted: list[Row] = []

    # One INSERT per record, not atomic: a failure keeps earlier records
    for record in request.records():
        data = to_storage(request.table, record, schema)

        if not data.get("id"):
            data["id"] = generate_uuid()

        now = utc_now()
        if not data.get("created_at"):
            data["created_at"] = now
        if schema.tracks_updated_at(request.table) and not data.get("updated_at"):
            data["updated_at"] = now

        columns = ", ".join(quote_identifier(c) for c in data)
        placeholders = ", ".join("?" for _ in data)
        _run(
            connection,
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
            list(data.values()),
        )

        # .insert(...).select() returns the stored rows
        if request.columns:
            inserted.extend(
                _fetch_rows(
                    connection,
                    f"SELECT {_projection(request.columns)} FROM {table} WHERE \"id\" = ?",
                    [data["id"]],
                    request.table,
                    schema,
                )[:1]
            )

    if request.single and inserted:
        return QueryResult.success(inserted[0])

    return QueryResult.success(inserted if request.columns else None)


def _execute_update(
    connection: sqlite3.Connection,
    request: QueryRequest,
    schema: SchemaMetadata,
) -> QueryResult:
    data = to_storage(request.table, request.first_record(), schema)

    # Last write wins: a caller-supplied updated_at is overwritten
    if schema.tracks_updated_at(request.table):
        data["updated_at"] = utc_now()

    if not data:
        return QueryResult.failure(validation_error("Update requires at least one column"))

    table = quote_identifier(request.table)
    where = build_where(request.filters, request.table, schema)
    set_clause = ", ".join(f"{quote_identifier(k)} = ?" for k in data)

    sql = f"UPDATE {table} SET {set_clause}"
    if where.clause:
        sql += f" {where.clause}"
    affected = _run(connection, sql, [*data.values(), *where.params])
    logger.debug("Updated %d row(s) in %s", affected, request.table)

    if not request.columns:
        return QueryResult.success(None)

    select_sql = f"SELECT {_projection(request.columns)} FROM {table}"
    if where.clause:
        select_sql += f" {where.clause}"
    rows = _fetch_rows(connection, select_sql, list(where.params), request.table, schema)

    if request.single:
        return QueryResult.success(rows[0] if rows else None)
    return QueryResult.success(rows)


def _execute_delete(
    connection: sqlite3.Connection,
    request: QueryRequest,
    schema: SchemaMetadata,
) -> QueryResult:
    where = build_where(request.filters, request.table, schema)

    sql = f"DELETE FROM {quote_identifier(request.table)}"
    if where.clause:
        sql += f" {where.clause}"
    affected = _run(connection, sql, list(where.params))
    logger.debug("Deleted %d row(s) from %s", affected, request.table)

    # Callers that need the deleted rows must read them first
    return QueryResult.success(None)
