"""
Localbase - RPC handlers for desktop mode.

Replaces the PostgreSQL functions the app calls via supabase.rpc().

Functions:
- is_person_in_subtree: Is target a descendant of root (BFS over families/children)

Handlers register with @rpc_handler(name, ParamsModel); parameters are
validated before the handler touches the database.
"""

import logging
import sqlite3
from collections import deque
from collections.abc import Mapping
from contextlib import closing
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel, Field, ValidationError

from localbase.errors import (
    map_engine_error,
    unknown_function_error,
    validation_error,
)
from localbase.models import QueryResult

logger = logging.getLogger(__name__)


# =============================================================================
# Registry
# =============================================================================


@dataclass(frozen=True)
class RpcHandler:
    name: str
    params_model: type[BaseModel]
    fn: Callable[[sqlite3.Connection, Any], Any]


RPC_HANDLERS: dict[str, RpcHandler] = {}


def rpc_handler(name: str, params_model: type[BaseModel]):
    """Register a function as the handler for supabase.rpc(name, ...)."""

    def decorator(fn: Callable[[sqlite3.Connection, Any], Any]):
        RPC_HANDLERS[name] = RpcHandler(name=name, params_model=params_model, fn=fn)
        return fn

    return decorator


def invoke(
    connection: sqlite3.Connection,
    function_name: str,
    params: Mapping[str, Any] | None = None,
) -> QueryResult:
    """
    Dispatch an RPC call.

    Args:
        connection: Open SQLite connection
        function_name: Name passed to supabase.rpc()
        params: Flat mapping of parameters

    Returns:
        QueryResult with the function's return value or an error
    """
    handler = RPC_HANDLERS.get(function_name)
    if handler is None:
        logger.warning("Unknown RPC function: %s", function_name)
        return QueryResult.failure(unknown_function_error(function_name))

    try:
        validated = handler.params_model.model_validate(dict(params or {}))
    except ValidationError as e:
        missing = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        return QueryResult.failure(
            validation_error(f"Invalid parameters for {function_name}: {missing}", details=str(e))
        )

    try:
        return QueryResult.success(handler.fn(connection, validated))
    except sqlite3.Error as e:
        return QueryResult.failure(map_engine_error(e))
    except Exception as e:
        logger.exception("RPC %s failed", function_name)
        return QueryResult.failure(map_engine_error(e))


# =============================================================================
# Family Tree Functions
# =============================================================================


class SubtreeParams(BaseModel):
    root_id: str = Field(min_length=1)
    target_id: str = Field(min_length=1)


def is_person_in_subtree(connection: sqlite3.Connection, root_id: str, target_id: str) -> bool:
    """
    Check if target_id is in the subtree rooted at root_id.

    Breadth-first over families (parent -> family) and children
    (family -> person). The visited set guarantees termination on
    cyclic data or a person listed as a child of several families.
    """
    if root_id == target_id:
        return True

    visited: set[str] = set()
    queue = deque([root_id])

    with closing(connection.cursor()) as family_cursor, closing(connection.cursor()) as child_cursor:
        while queue:
            current_id = queue.popleft()
            if current_id in visited:
                continue
            visited.add(current_id)

            # Families where this person is a parent
            family_cursor.execute(
                "SELECT id FROM families WHERE father_id = ? OR mother_id = ?",
                (current_id, current_id),
            )
            family_ids = [row[0] for row in family_cursor.fetchall()]

            for family_id in family_ids:
                child_cursor.execute(
                    "SELECT person_id FROM children WHERE family_id = ?",
                    (family_id,),
                )
                for (child_id,) in child_cursor.fetchall():
                    if child_id == target_id:
                        return True
                    if child_id not in visited:
                        queue.append(child_id)

    return False


@rpc_handler("is_person_in_subtree", SubtreeParams)
def _rpc_is_person_in_subtree(connection: sqlite3.Connection, params: SubtreeParams) -> bool:
    return is_person_in_subtree(connection, params.root_id, params.target_id)
