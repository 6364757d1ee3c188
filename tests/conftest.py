"""
Pytest configuration and fixtures for localbase tests.
"""

import os
from datetime import datetime, timedelta, timezone

import pytest

# Force local mode before importing localbase modules
os.environ["SUPABASE_URL"] = ""

from localbase.db.auth import LocalSession
from localbase.db.client import LocalClient
from localbase.db.request_context import clear_request_context
from localbase.db.store import Store

SCHEMA = """
CREATE TABLE users (
    id TEXT PRIMARY KEY,
    username TEXT UNIQUE,
    email TEXT,
    is_admin INTEGER DEFAULT 0,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE projects (
    id TEXT PRIMARY KEY,
    user_id TEXT REFERENCES users(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    description TEXT,
    tags TEXT DEFAULT '[]',
    is_featured INTEGER DEFAULT 0,
    upvotes INTEGER DEFAULT 0,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE grants (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    amount INTEGER,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE submissions (
    id TEXT PRIMARY KEY,
    project_id TEXT REFERENCES projects(id) ON DELETE CASCADE,
    grant_id TEXT REFERENCES grants(id) ON DELETE CASCADE,
    status TEXT DEFAULT 'pending',
    created_at TEXT,
    updated_at TEXT
);
"""


class FakeClock:
    """Deterministic clock: each call advances one second."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + timedelta(seconds=1)
        return now


@pytest.fixture
def store():
    """In-memory store with the community app schema."""
    s = Store(":memory:")
    s.executescript(SCHEMA)
    yield s
    s.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session():
    return LocalSession()


@pytest.fixture
def client(store, clock, session):
    """LocalClient over the in-memory store, with a fake clock."""
    return LocalClient(store, session=session, clock=clock)


@pytest.fixture(autouse=True)
def reset_request_context():
    yield
    clear_request_context()


@pytest.fixture
def kevin(client):
    """A user row."""
    return client.table("users").insert(
        {"id": "user-kevin", "username": "kevin", "email": "kevin@example.com", "is_admin": True}
    ).execute().data


@pytest.fixture
def sample_projects(client, kevin):
    """Three projects owned by kevin."""
    rows = [
        {"id": "proj-1", "user_id": kevin["id"], "title": "demo", "tags": ["ai", "web"], "upvotes": 10},
        {"id": "proj-2", "user_id": kevin["id"], "title": "ops bot", "tags": ["aiops"], "upvotes": 3, "is_featured": True},
        {"id": "proj-3", "user_id": kevin["id"], "title": "game", "tags": [], "upvotes": 7},
    ]
    return client.table("projects").insert(rows).execute().data
