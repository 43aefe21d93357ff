"""
Localbase - Offline SQLite backend for the Supabase query DSL.

Lets application code written against the Supabase client
(.select(), .eq(), .in_(), .single(), .rpc(), ...) run unmodified
against a local SQLite file in desktop mode.

Entry points:
- execute: Run a query request (table + method + filters + modifiers)
- invoke: Call a named RPC function
- LocalClient: Fluent client matching the Supabase query builder
"""

from localbase.executor import execute
from localbase.models import QueryRequest, QueryResult
from localbase.rpc import invoke

__version__ = "1.0.0"

__all__ = [
    "execute",
    "invoke",
    "QueryRequest",
    "QueryResult",
]
