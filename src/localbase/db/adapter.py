"""
Database Adapter Protocol.

The interface application data-access code is written against. Two
implementations satisfy it: the hosted Supabase client (production) and
LocalClient (local development over SQLite).

table() returns a builder supporting the PostgREST-style fluent API:
.select(), .insert(), .update(), .delete(), .eq(), .execute(), etc.
The local implementation covers the subset the call sites use:
eq, neq, in_, contains, gt, lt, gte, lte, order, limit, single.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DatabaseAdapter(Protocol):
    """
    Abstract database access for the app's data layer.

    `auth` exposes get_user(), sign_in_with_oauth(), sign_out() and
    on_auth_state_change().
    """

    auth: Any

    def table(self, name: str) -> Any:
        """Return a query builder for the given table."""
        ...

    def from_(self, name: str) -> Any:
        """Alias of table()."""
        ...
