"""
Localbase - Request-scoped current user.

A context variable stands in for the hosted session cookie. Dev tooling and
tests call set_local_user() to act as a given user.
"""

from contextvars import ContextVar
from typing import Optional

_user_id: ContextVar[Optional[str]] = ContextVar("localbase_user_id", default=None)


def set_local_user(user_id: str | None) -> None:
    """Act as user_id for the rest of this context. None logs out."""
    _user_id.set(user_id)


def get_current_user_id() -> str | None:
    """Get the current context's user ID."""
    return _user_id.get()


def clear_request_context() -> None:
    """Clear the current user (call at end of request)."""
    _user_id.set(None)
