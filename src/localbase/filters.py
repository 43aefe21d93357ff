"""
Localbase - Filter Builder.

Compiles Supabase filter descriptors into a parameterized SQLite WHERE
clause.

Supported filters (one pydantic model per `type`):
- eq:    .eq(column, value)               -> "col" = ?
- in:    .in_(column, [values])           -> "col" IN (?, ?)
- is:    .is_(column, None)               -> "col" IS NULL
- ilike: .ilike(column, pattern)          -> unicode_lower("col") LIKE unicode_lower(?)
- not:   .not_(column, "is", None)        -> "col" IS NOT NULL
         .not_(column, "eq", value)       -> "col" != ?
- or:    .or_("col.op.val,col.op.val")    -> ("col" op ? OR "col" op ?)

Identifiers are always double-quoted; values are always bound as
parameters, never concatenated into the SQL text.
"""

from typing import Annotated, Any, Literal, NamedTuple, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from localbase.coerce import coerce_filter_value
from localbase.schema import DEFAULT_SCHEMA, SchemaMetadata

# SQL function registered on every connection (see localbase.db.connection).
# SQLite's own LOWER() only folds ASCII, which breaks Vietnamese names.
LOWER_FUNCTION = "unicode_lower"


def unicode_lower(value: Any) -> Any:
    """Unicode-aware LOWER() for SQLite. Non-text values pass through."""
    if isinstance(value, str):
        return value.lower()
    return value


def _null_literal(value: Any) -> Any:
    # PostgREST spells null as the string "null" in .is_() calls
    if isinstance(value, str) and value.lower() == "null":
        return None
    return value


# =============================================================================
# Filter Models
# =============================================================================


class EqFilter(BaseModel):
    """column = value"""

    type: Literal["eq"] = "eq"
    column: str
    value: Any


class InFilter(BaseModel):
    """column IN (values). An empty list matches nothing."""

    type: Literal["in"] = "in"
    column: str
    value: list[Any]


class IsFilter(BaseModel):
    """column IS NULL. Only null is supported."""

    type: Literal["is"] = "is"
    column: str
    value: None = None

    normalize_null = field_validator("value", mode="before")(_null_literal)


class IlikeFilter(BaseModel):
    """Case-insensitive LIKE across the full Unicode range."""

    type: Literal["ilike"] = "ilike"
    column: str
    value: str


class NotFilter(BaseModel):
    """
    Negated filter.

    operator="is" (value must be null) -> IS NOT NULL
    anything else                      -> column != value
    """

    type: Literal["not"] = "not"
    column: str
    operator: Literal["is", "eq", "neq"] = "eq"
    value: Any = None

    @model_validator(mode="after")
    def check_is_null(self) -> "NotFilter":
        if self.operator == "is":
            self.value = _null_literal(self.value)
            if self.value is not None:
                raise ValueError("not.is only supports null")
        return self


class OrFilter(BaseModel):
    """
    PostgREST OR string: "father_id.eq.X,mother_id.eq.Y".

    Values are bound as raw strings; no boolean/JSON coercion is applied,
    unlike every other filter type.
    """

    type: Literal["or"] = "or"
    condition: str = ""


Filter = Annotated[
    Union[EqFilter, InFilter, IsFilter, IlikeFilter, NotFilter, OrFilter],
    Field(discriminator="type"),
]


# =============================================================================
# OR Condition Parsing
# =============================================================================

OR_OPERATORS: dict[str, str] = {
    "eq": "=",
    "neq": "!=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}


class OrTerm(NamedTuple):
    column: str
    op: str
    value: str


def parse_or_condition(condition: str) -> list[OrTerm]:
    """
    Parse "col.op.val,col.op.val" into OR terms.

    The value may contain dots ("email.eq.a.b@x.vn"), so everything after
    the operator is rejoined. Unknown operators fall back to equality.
    Blank segments are skipped.
    """
    terms = []
    for part in condition.split(","):
        part = part.strip()
        if not part:
            continue
        segments = part.split(".")
        column = segments[0]
        operator = segments[1] if len(segments) > 1 else ""
        value = ".".join(segments[2:])
        terms.append(OrTerm(column, OR_OPERATORS.get(operator, "="), value))
    return terms


# =============================================================================
# WHERE Builder
# =============================================================================


class WhereClause(NamedTuple):
    clause: str
    params: list[Any]


def quote_identifier(name: str) -> str:
    """Double-quote a table/column name (handles reserved words and mixed case)."""
    return '"' + name.replace('"', '""') + '"'


def build_where(
    filters: list[Filter],
    table: str,
    schema: SchemaMetadata = DEFAULT_SCHEMA,
) -> WhereClause:
    """
    Compile filters into "WHERE ... AND ..." plus positional parameters.

    Returns an empty clause (match all rows) when there are no conditions.
    """
    conditions: list[str] = []
    params: list[Any] = []

    def coerce(column: str, value: Any) -> Any:
        return coerce_filter_value(table, column, value, schema)

    for f in filters:
        match f:
            case EqFilter():
                conditions.append(f"{quote_identifier(f.column)} = ?")
                params.append(coerce(f.column, f.value))

            case InFilter():
                if not f.value:
                    conditions.append("1 = 0")
                else:
                    placeholders = ", ".join("?" for _ in f.value)
                    conditions.append(f"{quote_identifier(f.column)} IN ({placeholders})")
                    params.extend(coerce(f.column, v) for v in f.value)

            case IsFilter():
                conditions.append(f"{quote_identifier(f.column)} IS NULL")

            case IlikeFilter():
                conditions.append(
                    f"{LOWER_FUNCTION}({quote_identifier(f.column)}) LIKE {LOWER_FUNCTION}(?)"
                )
                params.append(f.value)

            case NotFilter():
                if f.operator == "is":
                    conditions.append(f"{quote_identifier(f.column)} IS NOT NULL")
                else:
                    conditions.append(f"{quote_identifier(f.column)} != ?")
                    params.append(coerce(f.column, f.value))

            case OrFilter():
                terms = parse_or_condition(f.condition)
                if terms:
                    or_clauses = []
                    for term in terms:
                        or_clauses.append(f"{quote_identifier(term.column)} {term.op} ?")
                        params.append(term.value)
                    conditions.append(f"({' OR '.join(or_clauses)})")

    return WhereClause(
        clause=f"WHERE {' AND '.join(conditions)}" if conditions else "",
        params=params,
    )
