"""
Localbase - Query Builder (read path).

Mirrors the Supabase select builder:

    client.table("projects").select("*, user:users(*)").eq("title", "demo").single().execute()
    await client.table("projects").select("*", count="exact", head=True).eq("is_featured", True)

Nothing touches the store until execute() runs or the builder is awaited.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Literal

from localbase.db.builder import AwaitableBuilder, BuilderContext
from localbase.db.filters import FilterClause, FilterMixin, compile_filters
from localbase.db.relations import SelectShape, parse_shape
from localbase.db.response import APIResponse
from localbase.db.store import validate_identifier

logger = logging.getLogger(__name__)

CountMode = Literal["exact"]


@dataclass(frozen=True)
class QuerySpec:
    """Accumulated description of a read. Builders swap in updated copies."""

    table: str
    shape: SelectShape = SelectShape()
    filters: tuple[FilterClause, ...] = ()
    order_by: tuple[str, bool] | None = None  # (column, ascending)
    limit: int | None = None
    single: bool = False
    count: CountMode | None = None
    head: bool = False


class QueryBuilder(FilterMixin, AwaitableBuilder):
    """Chainable SELECT builder."""

    def __init__(self, table: str, ctx: BuilderContext):
        self.ctx = ctx
        self.spec = QuerySpec(table=validate_identifier(table, "table"))

    def _update(self, **changes) -> "QueryBuilder":
        self.spec = replace(self.spec, **changes)
        return self

    def _add_filter(self, clause: FilterClause) -> "QueryBuilder":
        return self._update(filters=self.spec.filters + (clause,))

    def select(
        self,
        columns: str = "*",
        *,
        count: CountMode | None = None,
        head: bool = False,
    ) -> "QueryBuilder":
        if count not in (None, "exact"):
            raise ValueError(f"Unsupported count mode: {count!r}")
        return self._update(shape=parse_shape(columns, self.spec.table), count=count, head=head)

    def order(self, column: str, *, desc: bool = False, ascending: bool | None = None) -> "QueryBuilder":
        """Order by a single column. `ascending` wins over `desc` when given."""
        if ascending is None:
            ascending = not desc
        return self._update(order_by=(validate_identifier(column), ascending))

    def limit(self, count: int) -> "QueryBuilder":
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValueError(f"limit must be a non-negative int, got {count!r}")
        return self._update(limit=count)

    def single(self) -> "QueryBuilder":
        """Return one row (or None) instead of a list."""
        return self._update(single=True)

    # Local reads never error on zero rows, so the two are the same here
    maybe_single = single

    # -------------------------------------------------------------------------
    # Compilation
    # -------------------------------------------------------------------------

    def compile_count(self) -> tuple[str, list[Any]]:
        """COUNT(*) over the filters only; order and limit do not apply."""
        where, params = compile_filters(self.spec.filters)
        sql = f"SELECT COUNT(*) AS count FROM {self.spec.table}"
        return (f"{sql} {where}" if where else sql), params

    def compile(self) -> tuple[str, list[Any]]:
        """Build the SELECT statement and its parameters."""
        spec = self.spec
        where, params = compile_filters(spec.filters)

        parts = [f"SELECT * FROM {spec.table}"]
        if where:
            parts.append(where)
        if spec.order_by:
            column, ascending = spec.order_by
            parts.append(f"ORDER BY {column} {'ASC' if ascending else 'DESC'}")

        limit = spec.limit
        if spec.single and limit is None:
            limit = 1
        if limit is not None:
            parts.append("LIMIT ?")
            params = params + [limit]

        return " ".join(parts), params

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _count(self) -> int:
        sql, params = self.compile_count()
        return self.ctx.store.fetch_one(sql, params)["count"]

    def execute(self) -> APIResponse:
        spec = self.spec
        try:
            if spec.head:
                count = self._count() if spec.count == "exact" else None
                return APIResponse(data=None, count=count)

            sql, params = self.compile()
            stored = self.ctx.store.fetch_all(sql, params)
            rows = [self.ctx.expander.materialize(r, spec.table, spec.shape) for r in stored]
            count = self._count() if spec.count == "exact" else None

            if spec.single:
                return APIResponse(data=rows[0] if rows else None, count=count)
            return APIResponse(data=rows, count=count)
        except Exception as e:
            logger.error(f"SQLite query error on {spec.table}: {e}")
            return APIResponse.failure(e)
