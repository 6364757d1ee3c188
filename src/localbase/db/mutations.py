"""
Localbase - Insert, Update and Delete builders.

Writes go through the Row Codec. Inserts get an id and timestamps when the
caller did not supply them; every update re-stamps updated_at. Update and
delete refuse to run without a filter, as the hosted service does.
"""

import logging
import uuid
from typing import Any

from localbase.db.builder import AwaitableBuilder, BuilderContext
from localbase.db.filters import FilterClause, FilterMixin, compile_filters
from localbase.db.relations import parse_shape
from localbase.db.response import APIResponse, DbError
from localbase.db.store import validate_identifier

logger = logging.getLogger(__name__)


def _validate_columns(values: dict) -> dict:
    if not isinstance(values, dict):
        raise ValueError(f"Expected a dict of column values, got {type(values).__name__}")
    for column in values:
        validate_identifier(column)
    return values


def _missing_filters(operation: str, table: str) -> APIResponse:
    return APIResponse(
        data=None,
        error=DbError(
            message=f"{operation} on '{table}' requires at least one filter",
            code="missing_filters",
        ),
    )


class InsertBuilder(AwaitableBuilder):
    """
    INSERT one row (dict) or several (list of dicts).

    data is the persisted row as the codec reads it back, including the
    generated id and timestamps. A list input returns a list.
    """

    def __init__(self, table: str, values: dict | list[dict], ctx: BuilderContext):
        self.table = validate_identifier(table, "table")
        self.ctx = ctx
        self.is_batch = isinstance(values, list)
        self.rows = [_validate_columns(v) for v in (values if self.is_batch else [values])]
        self.return_single = False

    def select(self, columns: str = "*") -> "InsertBuilder":
        # Row is already in hand; accepted for call-site compatibility
        return self

    def single(self) -> "InsertBuilder":
        self.return_single = True
        return self

    def _prepare(self, values: dict, now: str) -> dict:
        data = dict(values)
        if data.get("id") is None:
            data["id"] = str(uuid.uuid4())
        if data.get("created_at") is None:
            data["created_at"] = now
        if data.get("updated_at") is None:
            data["updated_at"] = now
        return self.ctx.codec.encode(data, self.table)

    def _insert_one(self, encoded: dict) -> None:
        columns = list(encoded)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({placeholders})"
        self.ctx.store.run(sql, list(encoded.values()))

    def execute(self) -> APIResponse:
        try:
            now = self.ctx.timestamp()
            inserted = []
            for values in self.rows:
                encoded = self._prepare(values, now)
                self._insert_one(encoded)
                inserted.append(self.ctx.codec.decode(encoded, self.table))
        except Exception as e:
            logger.error(f"SQLite insert error on {self.table}: {e}")
            return APIResponse.failure(e)

        if self.return_single or not self.is_batch:
            return APIResponse(data=inserted[0] if inserted else None)
        return APIResponse(data=inserted)


class UpdateBuilder(FilterMixin, AwaitableBuilder):
    """
    UPDATE rows matching the accumulated filters.

    With .select() the rows are read back after the write (a list, or one
    row with .single()); otherwise data echoes the values written.
    """

    def __init__(self, table: str, values: dict, ctx: BuilderContext):
        self.table = validate_identifier(table, "table")
        self.values = _validate_columns(values)
        self.ctx = ctx
        self.filters: list[FilterClause] = []
        self.return_shape = None
        self.return_single = False

    def _add_filter(self, clause: FilterClause) -> "UpdateBuilder":
        self.filters.append(clause)
        return self

    def select(self, columns: str = "*") -> "UpdateBuilder":
        self.return_shape = parse_shape(columns, self.table)
        return self

    def single(self) -> "UpdateBuilder":
        self.return_single = True
        return self

    def _read_back(self, where: str, params: list[Any]) -> Any:
        stored = self.ctx.store.fetch_all(f"SELECT * FROM {self.table} {where}", params)
        rows = [self.ctx.expander.materialize(r, self.table, self.return_shape) for r in stored]
        if self.return_single:
            return rows[0] if rows else None
        return rows

    def execute(self) -> APIResponse:
        if not self.filters:
            return _missing_filters("UPDATE", self.table)

        try:
            data = {**self.values, "updated_at": self.ctx.timestamp()}
            encoded = self.ctx.codec.encode(data, self.table)
            set_clause = ", ".join(f"{column} = ?" for column in encoded)
            where, params = compile_filters(self.filters)
            self.ctx.store.run(
                f"UPDATE {self.table} SET {set_clause} {where}",
                list(encoded.values()) + params,
            )

            if self.return_shape is not None:
                return APIResponse(data=self._read_back(where, params))
            return APIResponse(data=self.ctx.codec.decode(encoded, self.table))
        except Exception as e:
            logger.error(f"SQLite update error on {self.table}: {e}")
            return APIResponse.failure(e)


class DeleteBuilder(FilterMixin, AwaitableBuilder):
    """DELETE rows matching the accumulated filters. Zero matches is fine."""

    def __init__(self, table: str, ctx: BuilderContext):
        self.table = validate_identifier(table, "table")
        self.ctx = ctx
        self.filters: list[FilterClause] = []

    def _add_filter(self, clause: FilterClause) -> "DeleteBuilder":
        self.filters.append(clause)
        return self

    def execute(self) -> APIResponse:
        if not self.filters:
            return _missing_filters("DELETE", self.table)

        try:
            where, params = compile_filters(self.filters)
            deleted = self.ctx.store.run(f"DELETE FROM {self.table} {where}", params)
            logger.debug(f"Deleted {deleted} row(s) from {self.table}")
            return APIResponse(data=None)
        except Exception as e:
            logger.error(f"SQLite delete error on {self.table}: {e}")
            return APIResponse.failure(e)
