"""
Localbase - Database access.

Supabase-shaped client over a local SQLite store, plus the selector that
decides between it and the hosted client.
"""

from localbase.db.client import LocalClient, create_local_client, get_client, reset_client
from localbase.db.request_context import set_local_user
from localbase.db.response import APIResponse, DbError, LocalbaseError
from localbase.db.store import Store

__all__ = [
    "APIResponse",
    "DbError",
    "LocalClient",
    "LocalbaseError",
    "Store",
    "create_local_client",
    "get_client",
    "reset_client",
    "set_local_user",
]
