"""
Localbase - Row Codec.

SQLite has no boolean or array types. Booleans are stored as 0/1 and arrays
as JSON text; this module converts between that storage shape and the
logical shape the app (and the hosted client) works with.
"""

import json
from typing import Any, Iterable

DEFAULT_BOOLEAN_COLUMNS = frozenset({"is_admin", "is_featured"})
DEFAULT_ARRAY_COLUMNS = frozenset({"tags"})


def _parse_array(value: Any) -> list:
    """Parse a stored array column. Never raises, never returns None."""
    if isinstance(value, list):
        return value
    if not isinstance(value, str):
        return []
    try:
        parsed = json.loads(value)
    except ValueError:
        return []
    return parsed if isinstance(parsed, list) else []


def _looks_like_array(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("[") and value.endswith("]")


class RowCodec:
    """
    Encode/decode rows between storage and logical shape.

    Column rules are plain names ("tags") or table-qualified names
    ("projects.tags"); the qualified form only applies to that table.
    """

    def __init__(
        self,
        boolean_columns: Iterable[str] = DEFAULT_BOOLEAN_COLUMNS,
        array_columns: Iterable[str] = DEFAULT_ARRAY_COLUMNS,
    ):
        self.boolean_columns = frozenset(boolean_columns)
        self.array_columns = frozenset(array_columns)

    def is_boolean(self, column: str, table: str | None = None) -> bool:
        return column in self.boolean_columns or (
            table is not None and f"{table}.{column}" in self.boolean_columns
        )

    def is_array(self, column: str, table: str | None = None) -> bool:
        return column in self.array_columns or (
            table is not None and f"{table}.{column}" in self.array_columns
        )

    def decode(self, row: dict | None, table: str | None = None) -> dict | None:
        """Widen a stored row to logical types. None passes through."""
        if row is None:
            return None

        result = dict(row)
        for column, value in result.items():
            if self.is_boolean(column, table):
                result[column] = bool(value)
            elif self.is_array(column, table):
                result[column] = _parse_array(value)
            elif _looks_like_array(value):
                try:
                    parsed = json.loads(value)
                except ValueError:
                    continue
                if isinstance(parsed, list):
                    result[column] = parsed
        return result

    def encode(self, values: dict, table: str | None = None) -> dict:
        """Narrow logical values to storage scalars."""
        result = dict(values)
        for column, value in result.items():
            if isinstance(value, bool):
                result[column] = 1 if value else 0
            elif isinstance(value, (list, tuple)):
                result[column] = json.dumps(list(value))
        return result
