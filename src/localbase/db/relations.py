"""
Localbase - Select shapes and relationship expansion.

A select string like "*, user:users(*)" is parsed once into a SelectShape.
Relations are single-hop foreign keys: "user:users(*)" attaches the users row
whose id equals row["user_id"] under the key "user". Nested relations
("project:projects(*, user:users(*))") are expanded one hop at a time.

Token syntax:
    column                      plain column
    *                           all columns
    alias:table(shape)          relation, foreign key "<alias>_id"
    table(shape)                relation, alias = table
    alias:table!fk_col(shape)   relation with an explicit foreign key column
    alias:table!t_col_fkey(shape)
                                relation named by its constraint, foreign key "col"
"""

import re
from dataclasses import dataclass

from localbase.db.codec import RowCodec
from localbase.db.store import Store, validate_identifier

_RELATION = re.compile(
    r"^(?:(?P<alias>\w+)\s*:\s*)?(?P<table>\w+)(?:\s*!\s*(?P<fk>\w+))?\s*\((?P<inner>.*)\)$",
    re.DOTALL,
)
_FKEY_SUFFIX = "_fkey"


class ShapeError(ValueError):
    """Malformed select shape."""


@dataclass(frozen=True)
class Relation:
    alias: str
    table: str
    foreign_key: str
    shape: "SelectShape"


@dataclass(frozen=True)
class SelectShape:
    columns: tuple[str, ...] = ("*",)
    relations: tuple[Relation, ...] = ()

    @property
    def all_columns(self) -> bool:
        return "*" in self.columns


def _split_top_level(shape: str) -> list[str]:
    """Split on commas that are not inside parentheses."""
    tokens: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in shape:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise ShapeError(f"Unbalanced ')' in select shape: {shape!r}")
        if ch == "," and depth == 0:
            tokens.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    if depth != 0:
        raise ShapeError(f"Unbalanced '(' in select shape: {shape!r}")
    tokens.append("".join(current).strip())
    return [t for t in tokens if t]


def _resolve_foreign_key(hint: str, table: str | None) -> str:
    """
    Map a "!hint" to a foreign key column.

    A constraint name "<table>_<column>_fkey" resolves to <column>; anything
    else is taken as the column name itself.
    """
    if not hint.endswith(_FKEY_SUFFIX):
        return hint
    prefix = f"{table}_" if table else None
    body = hint[: -len(_FKEY_SUFFIX)]
    if prefix is None or not body.startswith(prefix) or body == prefix:
        raise ShapeError(f"Foreign key constraint {hint!r} does not belong to table {table!r}")
    return body[len(prefix):]


def parse_shape(shape: str | None, table: str | None = None) -> SelectShape:
    """
    Parse a select string into a SelectShape.

    `table` is the table the shape is read from; it is needed to resolve
    constraint-name hints such as "creator:users!grants_created_by_fkey(*)".
    """
    if shape is None or not shape.strip():
        return SelectShape()

    columns: list[str] = []
    relations: list[Relation] = []

    for token in _split_top_level(shape):
        if token == "*":
            columns.append("*")
            continue

        if "(" in token:
            match = _RELATION.match(token)
            if not match:
                raise ShapeError(f"Malformed relation in select shape: {token!r}")
            target = match.group("table")
            alias = match.group("alias") or target
            hint = match.group("fk")
            foreign_key = _resolve_foreign_key(hint, table) if hint else f"{alias}_id"
            try:
                validate_identifier(target, "table")
                validate_identifier(alias, "alias")
                validate_identifier(foreign_key)
            except ValueError as e:
                raise ShapeError(str(e)) from e
            relations.append(
                Relation(
                    alias=alias,
                    table=target,
                    foreign_key=foreign_key,
                    shape=parse_shape(match.group("inner"), target),
                )
            )
            continue

        try:
            columns.append(validate_identifier(token))
        except ValueError as e:
            raise ShapeError(str(e)) from e

    return SelectShape(columns=tuple(columns), relations=tuple(relations))


def project(row: dict, shape: SelectShape) -> dict:
    """
    Keep only the columns a shape asks for.

    Relation aliases and their foreign key columns are always kept.
    """
    if shape.all_columns:
        return row
    keep = set(shape.columns)
    for rel in shape.relations:
        keep.add(rel.alias)
        keep.add(rel.foreign_key)
    return {k: v for k, v in row.items() if k in keep}


class RelationExpander:
    """Attach related rows to decoded rows. Read-only."""

    def __init__(self, store: Store, codec: RowCodec):
        self.store = store
        self.codec = codec

    def _lookup(self, rel: Relation, fk_value) -> dict | None:
        stored = self.store.fetch_one(f"SELECT * FROM {rel.table} WHERE id = ?", [fk_value])
        return self.materialize(stored, rel.table, rel.shape)

    def expand(self, row: dict, shape: SelectShape) -> dict:
        """Return a copy of row with every relation in shape attached."""
        if not shape.relations:
            return row
        result = dict(row)
        for rel in shape.relations:
            fk_value = row.get(rel.foreign_key)
            result[rel.alias] = None if fk_value is None else self._lookup(rel, fk_value)
        return result

    def materialize(self, stored: dict | None, table: str, shape: SelectShape) -> dict | None:
        """Decode, expand and project a stored row."""
        row = self.codec.decode(stored, table)
        if row is None:
            return None
        return project(self.expand(row, shape), shape)
