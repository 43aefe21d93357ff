"""
Localbase - Database access protocol.

The surface application code is written against. A supabase-py Client
satisfies it structurally in server mode; LocalClient implements it over
SQLite in desktop mode.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DatabaseAdapter(Protocol):
    """Fluent table access plus RPC calls."""

    def table(self, name: str) -> Any:
        """Query builder for one table: .select() / .insert() / .eq() ... .execute()."""
        ...

    def rpc(self, function_name: str, params: dict | None = None) -> Any:
        """Pending call to a database function; .execute() yields {data, error}."""
        ...
