"""
Localbase - SQLite store handle.

One connection per process, opened explicitly and passed to the client.
No locking, no retry on SQLITE_BUSY and no transactions spanning calls:
every statement autocommits.
"""

import logging
import re
import sqlite3
from pathlib import Path
from typing import Any, Sequence

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_identifier(name: str, kind: str = "column") -> str:
    """Reject anything that is not a bare SQL identifier."""
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid {kind} name: {name!r}")
    return name


class Store:
    """
    Thin wrapper over a sqlite3 connection.

    Rows come back as plain dicts so the codec can copy and widen them.
    """

    def __init__(self, path: str | Path = ":memory:", foreign_keys: bool = True):
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            self.path,
            check_same_thread=False,
            isolation_level=None,
        )
        self._conn.row_factory = sqlite3.Row
        if foreign_keys:
            self._conn.execute("PRAGMA foreign_keys = ON")
        logger.info(f"Opened SQLite store at {self.path}")

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> dict | None:
        logger.debug(f"{sql} {list(params)}")
        row = self._conn.execute(sql, tuple(params)).fetchone()
        return dict(row) if row is not None else None

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        logger.debug(f"{sql} {list(params)}")
        return [dict(row) for row in self._conn.execute(sql, tuple(params)).fetchall()]

    def run(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Execute a write statement and return the affected row count."""
        logger.debug(f"{sql} {list(params)}")
        return self._conn.execute(sql, tuple(params)).rowcount

    def executescript(self, script: str) -> None:
        """Run a multi-statement script (schema setup, seeding)."""
        self._conn.executescript(script)

    def close(self) -> None:
        self._conn.close()
        logger.info(f"Closed SQLite store at {self.path}")
