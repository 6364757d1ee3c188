"""
Result envelope returned by every terminal operation.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel


class DbError(BaseModel):
    """A store failure, surfaced instead of raised."""

    message: str
    code: str
    details: str | None = None

    @classmethod
    def from_exception(cls, exc: Exception) -> "DbError":
        # sqlite3 errors carry the symbolic result code (3.11+)
        code = getattr(exc, "sqlite_errorname", None) or type(exc).__name__
        return cls(message=str(exc), code=code, details=type(exc).__name__)


class LocalbaseError(Exception):
    """Raised by APIResponse.raise_for_error()."""

    def __init__(self, error: DbError):
        super().__init__(f"{error.code}: {error.message}")
        self.error = error


@dataclass
class APIResponse:
    """
    Uniform {data, error, count} envelope.

    `data` is a list for multi-row reads, a dict or None for single-row
    reads, and None for deletes and head-only counts.
    """

    data: Any = None
    error: DbError | None = None
    count: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "APIResponse":
        if self.error is not None:
            raise LocalbaseError(self.error)
        return self

    @classmethod
    def failure(cls, exc: Exception) -> "APIResponse":
        return cls(data=None, error=DbError.from_exception(exc))
