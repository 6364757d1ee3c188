"""
Localbase - Mock auth surface.

Just enough of the hosted auth API for local development: get_user,
sign_in_with_oauth, sign_out and on_auth_state_change. No OAuth handshake
happens and no auth events are ever emitted.
"""

import logging
from typing import Any, Callable

from pydantic import BaseModel

from localbase.db import request_context
from localbase.db.store import Store, validate_identifier

logger = logging.getLogger(__name__)


class AuthUser(BaseModel):
    """Minimal user projection, as the hosted get_user() returns it."""

    id: str
    email: str | None = None


class UserResponse(BaseModel):
    user: AuthUser | None = None
    error: Any = None


class OAuthResponse(BaseModel):
    provider: str | None = None
    url: str | None = None
    error: Any = None


class SignOutResponse(BaseModel):
    error: Any = None


class AuthSubscription:
    """Handle returned by on_auth_state_change(). Nothing to unsubscribe from."""

    def __init__(self, callback: Callable[[str, Any], None]):
        self.callback = callback

    def unsubscribe(self) -> None:
        return None


class LocalSession:
    """Explicit identity holder. Pass one to the client to pin a user."""

    def __init__(self, user_id: str | None = None):
        self._user_id = user_id

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @user_id.setter
    def user_id(self, value: str | None) -> None:
        self._user_id = value


class RequestContextSession(LocalSession):
    """Session backed by the request context variable (set_local_user)."""

    @property
    def user_id(self) -> str | None:
        return request_context.get_current_user_id()

    @user_id.setter
    def user_id(self, value: str | None) -> None:
        request_context.set_local_user(value)


class LocalAuth:
    """Auth API bound to a store and a session."""

    def __init__(self, store: Store, session: LocalSession, users_table: str = "users"):
        self.store = store
        self.session = session
        self.users_table = validate_identifier(users_table, "table")

    def get_user(self) -> UserResponse:
        user_id = self.session.user_id
        if not user_id:
            return UserResponse(user=None)

        try:
            row = self.store.fetch_one(f"SELECT * FROM {self.users_table} WHERE id = ?", [user_id])
        except Exception as e:
            logger.error(f"SQLite auth lookup error: {e}")
            return UserResponse(user=None, error=str(e))

        if row is None:
            return UserResponse(user=None)
        return UserResponse(user=AuthUser(id=str(row["id"]), email=row.get("email")))

    def sign_in_with_oauth(self, credentials: dict | None = None) -> OAuthResponse:
        """Accepted and ignored; use set_local_user() to pick a user."""
        provider = (credentials or {}).get("provider")
        logger.info(f"Local auth: ignoring OAuth sign-in ({provider})")
        return OAuthResponse(provider=provider)

    def sign_out(self) -> SignOutResponse:
        self.session.user_id = None
        return SignOutResponse()

    def on_auth_state_change(self, callback: Callable[[str, Any], None]) -> AuthSubscription:
        return AuthSubscription(callback)
