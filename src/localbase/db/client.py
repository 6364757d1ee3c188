"""
Localbase - Client.

LocalClient is the table facade: client.table(name) hands out a builder per
operation. get_client() picks the local store or the hosted Supabase client
from settings and caches it for the life of the process.
"""

import logging
from datetime import datetime
from typing import Callable

from supabase import Client, create_client

from localbase.config import LocalbaseSettings, get_settings, should_use_local_db
from localbase.db.auth import LocalAuth, LocalSession, RequestContextSession
from localbase.db.builder import BuilderContext, utc_now
from localbase.db.codec import RowCodec
from localbase.db.mutations import DeleteBuilder, InsertBuilder, UpdateBuilder
from localbase.db.query import CountMode, QueryBuilder
from localbase.db.store import Store, validate_identifier

logger = logging.getLogger(__name__)


class TableBuilder:
    """Entry point for one table; each call starts a fresh builder."""

    def __init__(self, name: str, ctx: BuilderContext):
        self.name = validate_identifier(name, "table")
        self.ctx = ctx

    def select(self, columns: str = "*", *, count: CountMode | None = None, head: bool = False) -> QueryBuilder:
        return QueryBuilder(self.name, self.ctx).select(columns, count=count, head=head)

    def insert(self, values: dict | list[dict]) -> InsertBuilder:
        return InsertBuilder(self.name, values, self.ctx)

    def update(self, values: dict) -> UpdateBuilder:
        return UpdateBuilder(self.name, values, self.ctx)

    def delete(self) -> DeleteBuilder:
        return DeleteBuilder(self.name, self.ctx)


class LocalClient:
    """
    Supabase-shaped client over a local SQLite store.

    Args:
        store: Open store handle (shared by every builder)
        codec: Row Codec; defaults to is_admin/is_featured booleans and tags arrays
        session: Identity holder for auth; defaults to the request context
        clock: Returns the current aware datetime (for timestamps)
        users_table: Table behind auth.get_user()
    """

    def __init__(
        self,
        store: Store,
        *,
        codec: RowCodec | None = None,
        session: LocalSession | None = None,
        clock: Callable[[], datetime] = utc_now,
        users_table: str = "users",
    ):
        self.store = store
        self.ctx = BuilderContext(store=store, codec=codec or RowCodec(), clock=clock)
        self.session = session if session is not None else RequestContextSession()
        self.auth = LocalAuth(store, self.session, users_table=users_table)

    def table(self, name: str) -> TableBuilder:
        return TableBuilder(name, self.ctx)

    def from_(self, name: str) -> TableBuilder:
        return self.table(name)


def create_local_client(
    config: LocalbaseSettings | None = None,
    session: LocalSession | None = None,
) -> LocalClient:
    """Open the configured SQLite file and wrap it in a LocalClient."""
    config = config or get_settings()
    store = Store(config.local_db_path, foreign_keys=config.local_db_foreign_keys)
    codec = RowCodec(config.boolean_columns, config.array_columns)
    return LocalClient(store, codec=codec, session=session, users_table=config.users_table)


# Singleton client instance
_client: LocalClient | Client | None = None


def get_client() -> LocalClient | Client:
    """
    Get the process-wide client.

    LocalClient when no hosted Supabase URL is configured, otherwise the
    hosted client. Created once and reused.
    """
    global _client

    if _client is None:
        config = get_settings()
        if should_use_local_db(config):
            logger.info("No Supabase URL configured, using local SQLite store")
            _client = create_local_client(config)
        else:
            _client = create_client(config.supabase_url, config.supabase_anon_key or "")

    return _client


def reset_client() -> None:
    """Drop the cached client, closing the local store if one is open."""
    global _client

    if isinstance(_client, LocalClient):
        _client.store.close()
    _client = None
