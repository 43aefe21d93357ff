"""
Localbase - Database access.

Provides the SQLite connection used in desktop mode and the
Supabase-shaped client built on top of it (localbase.db.client).
"""

from localbase.db.connection import ensure_functions, open_connection, register_functions

__all__ = [
    "ensure_functions",
    "open_connection",
    "register_functions",
]
