"""
Localbase - Request and result models.

QueryRequest is the JSON payload the Supabase-shaped client sends for
one .execute(); QueryResult is the {data, error} shape every call
returns, identical to a Supabase response.
"""

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from localbase.errors import QueryError
from localbase.filters import Filter

Method = Literal["select", "insert", "update", "delete"]

METHODS: tuple[str, ...] = ("select", "insert", "update", "delete")


class OrderSpec(BaseModel):
    """One ORDER BY term."""

    column: str
    ascending: bool = True


class QueryRequest(BaseModel):
    """
    A single query against one table.

    Filters are combined with AND; an "or" filter contributes one
    parenthesized OR group.

    `single` (exactly one row required) and `maybe_single` (at most one
    row) are independent flags; a well-formed caller sets at most one.
    """

    model_config = ConfigDict(populate_by_name=True)

    table: str = Field(min_length=1)
    method: Method
    columns: str | None = None  # None = no .select() chained (writes return null)
    body: dict[str, Any] | list[dict[str, Any]] | None = None
    filters: list[Filter] = Field(default_factory=list)
    order: list[OrderSpec] = Field(default_factory=list)
    limit: int | None = Field(default=None, gt=0)
    single: bool = False
    maybe_single: bool = Field(
        default=False,
        validation_alias=AliasChoices("maybe_single", "maybeSingle"),
    )

    def records(self) -> list[dict[str, Any]]:
        """Body as a list of records (insert accepts one or many)."""
        if isinstance(self.body, list):
            return self.body
        return [self.body or {}]

    def first_record(self) -> dict[str, Any]:
        """Body as a single record (update uses only the first)."""
        if isinstance(self.body, list):
            return self.body[0] if self.body else {}
        return self.body or {}


class QueryResult(BaseModel):
    """Uniform {data, error} result. Exactly one side is meaningful."""

    data: Any = None
    error: QueryError | None = None

    @classmethod
    def success(cls, data: Any = None) -> "QueryResult":
        return cls(data=data, error=None)

    @classmethod
    def failure(cls, error: QueryError) -> "QueryResult":
        return cls(data=None, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None
