"""
Localbase - SQLite <-> PostgreSQL type coercion.

Boolean 0/1 <-> true/false, JSONB <-> TEXT, UUID generation.

Both directions are pure: they return a new dict and never raise.
"""

import json
import uuid
from dataclasses import dataclass
from typing import Any

from localbase.schema import DEFAULT_SCHEMA, SchemaMetadata


@dataclass(frozen=True)
class ParsedDocument:
    """
    Outcome of parsing a stored JSONB value.

    ok=False means the text was not JSON; value then holds the raw text,
    which is still valid content for a document column storing plain text.
    """

    ok: bool
    value: Any


def parse_document(text: str) -> ParsedDocument:
    """Parse stored document text, falling back to the raw text."""
    try:
        return ParsedDocument(ok=True, value=json.loads(text))
    except ValueError:
        return ParsedDocument(ok=False, value=text)


def serialize_document(value: Any) -> str:
    """Serialize a document the way JSON.stringify does (compact, UTF-8)."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def to_logical(
    table: str,
    row: dict[str, Any],
    schema: SchemaMetadata = DEFAULT_SCHEMA,
) -> dict[str, Any]:
    """Convert a row from SQLite types to PostgreSQL-like types."""
    meta = schema.table(table)

    result: dict[str, Any] = {}
    for key, value in row.items():
        if key in meta.boolean_columns:
            result[key] = value is True or value == 1
        elif key in meta.document_columns and isinstance(value, str):
            result[key] = parse_document(value).value
        else:
            result[key] = value
    return result


def to_storage(
    table: str,
    data: dict[str, Any],
    schema: SchemaMetadata = DEFAULT_SCHEMA,
) -> dict[str, Any]:
    """Convert input data from PostgreSQL-like types to SQLite types."""
    meta = schema.table(table)

    result: dict[str, Any] = {}
    for key, value in data.items():
        if key in meta.boolean_columns:
            result[key] = 1 if value else 0
        elif key in meta.document_columns and isinstance(value, (dict, list)):
            # Strings pass through: callers may write pre-serialized JSON
            result[key] = serialize_document(value)
        else:
            result[key] = value
    return result


def coerce_filter_value(
    table: str,
    column: str | None,
    value: Any,
    schema: SchemaMetadata = DEFAULT_SCHEMA,
) -> Any:
    """Coerce a boolean filter value to INTEGER 0/1 when the column is boolean."""
    if schema.is_boolean_column(table, column):
        if value is True:
            return 1
        if value is False:
            return 0
    return value


def generate_uuid() -> str:
    """Generate a new UUID (replaces PostgreSQL's uuid_generate_v4())."""
    return str(uuid.uuid4())
