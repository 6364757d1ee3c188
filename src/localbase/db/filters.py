"""
Localbase - Filter/Predicate Compiler.

Builders collect FilterClause values; compile_filters() turns them into a
parameterized WHERE clause. All clauses are AND'd. There is no OR combinator.
"""

from typing import Any, Literal

from pydantic import BaseModel, field_validator

from localbase.db.store import validate_identifier

FilterOp = Literal["eq", "neq", "in", "gt", "lt", "gte", "lte", "contains"]

_COMPARISONS = {
    "eq": "=",
    "neq": "!=",
    "gt": ">",
    "lt": "<",
    "gte": ">=",
    "lte": "<=",
}

# Compiles to a clause that is syntactically valid and matches no row
MATCH_NOTHING = "0 = 1"


class FilterClause(BaseModel):
    """A single filter condition."""

    column: str
    op: FilterOp
    value: Any

    @field_validator("column")
    @classmethod
    def _column_is_identifier(cls, v: str) -> str:
        return validate_identifier(v)


def _compile_clause(f: FilterClause) -> tuple[str, list[Any]]:
    match f.op:
        case "eq" | "neq" if f.value is None:
            return f"{f.column} IS {'NOT ' if f.op == 'neq' else ''}NULL", []
        case "in":
            values = list(f.value)
            if not values:
                return MATCH_NOTHING, []
            placeholders = ", ".join("?" for _ in values)
            return f"{f.column} IN ({placeholders})", values
        case "contains":
            # Arrays are stored as JSON text; match whole elements through
            # json_each so "ai" never matches inside "aiops". Text that is not
            # valid JSON is treated as an empty array.
            values = [f.value] if isinstance(f.value, str) else list(f.value)
            if not values:
                return MATCH_NOTHING, []
            placeholders = ", ".join("?" for _ in values)
            source = f"CASE WHEN json_valid({f.column}) THEN {f.column} ELSE '[]' END"
            return (
                f"EXISTS (SELECT 1 FROM json_each({source}) AS elem WHERE elem.value IN ({placeholders}))",
                values,
            )
        case _:
            return f"{f.column} {_COMPARISONS[f.op]} ?", [f.value]


def compile_filters(filters: list[FilterClause] | tuple[FilterClause, ...]) -> tuple[str, list[Any]]:
    """
    Compile filters into (where_sql, params).

    No filters compiles to ("", []), which matches every row.
    """
    if not filters:
        return "", []

    conditions: list[str] = []
    params: list[Any] = []
    for f in filters:
        sql, clause_params = _compile_clause(f)
        conditions.append(sql)
        params.extend(clause_params)

    return f"WHERE {' AND '.join(conditions)}", params


class FilterMixin:
    """
    Chainable predicate methods shared by the read, update and delete builders.

    Subclasses implement _add_filter(); every method returns the builder.
    """

    def _add_filter(self, clause: FilterClause):
        raise NotImplementedError

    def filter(self, column: str, op: FilterOp, value: Any):
        return self._add_filter(FilterClause(column=column, op=op, value=value))

    def eq(self, column: str, value: Any):
        return self.filter(column, "eq", value)

    def neq(self, column: str, value: Any):
        return self.filter(column, "neq", value)

    def in_(self, column: str, values: list):
        return self.filter(column, "in", list(values))

    def contains(self, column: str, values: list | str):
        return self.filter(column, "contains", values)

    def gt(self, column: str, value: Any):
        return self.filter(column, "gt", value)

    def lt(self, column: str, value: Any):
        return self.filter(column, "lt", value)

    def gte(self, column: str, value: Any):
        return self.filter(column, "gte", value)

    def lte(self, column: str, value: Any):
        return self.filter(column, "lte", value)
