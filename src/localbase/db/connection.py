"""
Localbase - SQLite connection.

Low-level engine access. The core never opens connections itself; it
runs statements against a handle supplied by its caller, so each test
can use a disposable in-memory database.
"""

import logging
import sqlite3
from contextlib import closing
from pathlib import Path

from localbase.filters import LOWER_FUNCTION, unicode_lower

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


def register_functions(connection: sqlite3.Connection) -> None:
    """Register the SQL functions compiled queries rely on."""
    connection.create_function(LOWER_FUNCTION, 1, unicode_lower, deterministic=True)


def ensure_functions(connection: sqlite3.Connection) -> None:
    """
    Register the SQL functions on a caller-supplied connection if missing.

    SQLite refuses to (re)define a function while any statement on the
    connection is still active, so an already-registered function is
    detected by calling it instead of registering unconditionally.
    """
    try:
        with closing(connection.execute(f"SELECT {LOWER_FUNCTION}(NULL)")) as cursor:
            cursor.fetchone()
    except sqlite3.OperationalError:
        register_functions(connection)
        logger.debug("Registered %s on caller connection", LOWER_FUNCTION)


def open_connection(path: str | Path = MEMORY) -> sqlite3.Connection:
    """
    Open the desktop database.

    Autocommit mode: every statement is its own transaction, matching
    the one-statement-per-call model of the Supabase REST API.
    """
    if str(path) != MEMORY:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    connection = sqlite3.connect(str(path), isolation_level=None)
    connection.execute("PRAGMA foreign_keys = ON")
    register_functions(connection)

    logger.debug("Opened SQLite database at %s", path)
    return connection
