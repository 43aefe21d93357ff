"""
Localbase - Error Mapper.

Translates SQLite failures into the PostgREST error shape
({message, code, details, hint}) so callers written against Supabase
can branch on the same codes offline.
"""

import logging

from pydantic import BaseModel

logger = logging.getLogger(__name__)


# PostgreSQL SQLSTATE / PostgREST codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
CHECK_VIOLATION = "23514"
UNDEFINED_TABLE = "42P01"
UNDEFINED_COLUMN = "42703"
SYNTAX_ERROR = "42601"
INVALID_PARAMETER = "22023"
NOT_FOUND = "PGRST116"
UNKNOWN_FUNCTION = "PGRST202"

# Substring that identifies a uniqueness violation in SQLite error text
UNIQUE_MARKER = "UNIQUE constraint failed"

# First match wins
_SQLITE_MESSAGE_CODES: list[tuple[str, str]] = [
    (UNIQUE_MARKER, UNIQUE_VIOLATION),
    ("FOREIGN KEY constraint failed", FOREIGN_KEY_VIOLATION),
    ("NOT NULL constraint failed", NOT_NULL_VIOLATION),
    ("CHECK constraint failed", CHECK_VIOLATION),
    ("no such table", UNDEFINED_TABLE),
    ("no such column", UNDEFINED_COLUMN),
    ("has no column named", UNDEFINED_COLUMN),
    ("syntax error", SYNTAX_ERROR),
]


class QueryError(BaseModel):
    """Error payload of a failed query or RPC call."""

    message: str
    code: str | None = None
    details: str | None = None
    hint: str | None = None


def is_unique_violation(exc: BaseException) -> bool:
    return UNIQUE_MARKER in str(exc)


def unique_violation_error(message: str) -> QueryError:
    return QueryError(message=message, code=UNIQUE_VIOLATION)


def not_found_error() -> QueryError:
    """Error for .single() when no row matched (same as PostgREST)."""
    return QueryError(
        message="JSON object requested, multiple (or no) rows returned",
        code=NOT_FOUND,
        details="The result contains 0 rows",
    )


def unknown_method_error(method: object) -> QueryError:
    return QueryError(message=f"Unknown method: {method}")


def unknown_function_error(function_name: str) -> QueryError:
    return QueryError(
        message=f"Unknown RPC function: {function_name}",
        code=UNKNOWN_FUNCTION,
    )


def validation_error(message: str, details: str | None = None) -> QueryError:
    return QueryError(message=message, code=INVALID_PARAMETER, details=details)


def map_engine_error(exc: BaseException) -> QueryError:
    """
    Map an SQLite failure to a PostgREST-style error.

    The message is passed through; the code is the conventional
    PostgreSQL SQLSTATE for the condition, or None when there isn't one.
    """
    message = str(exc) or exc.__class__.__name__
    for marker, code in _SQLITE_MESSAGE_CODES:
        if marker in message:
            logger.warning("SQLite error mapped to %s: %s", code, message)
            return QueryError(message=message, code=code)

    logger.warning("Unmapped SQLite error (%s): %s", exc.__class__.__name__, message)
    return QueryError(message=message)
