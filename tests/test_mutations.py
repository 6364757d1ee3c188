"""
Tests for the Insert, Update and Delete builders.
"""

import asyncio


def run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class TestInsert:
    def test_stamps_id_and_timestamps(self, client):
        row = client.table("grants").insert({"title": "x"}).execute().data
        assert row["id"]
        assert row["created_at"] == row["updated_at"]

    def test_returns_persisted_row(self, client, store):
        row = client.table("projects").insert({"title": "x", "tags": ["ai"], "is_featured": True}).execute().data
        assert row["tags"] == ["ai"]
        assert row["is_featured"] is True

        stored = store.fetch_one("SELECT * FROM projects WHERE id = ?", [row["id"]])
        assert stored["tags"] == '["ai"]'
        assert stored["is_featured"] == 1
        assert stored["created_at"] == row["created_at"]

    def test_caller_values_win(self, client):
        row = client.table("grants").insert(
            {"id": "g1", "title": "x", "created_at": "2020-01-01T00:00:00+00:00"}
        ).execute().data
        assert row["id"] == "g1"
        assert row["created_at"] == "2020-01-01T00:00:00+00:00"
        assert row["updated_at"] != row["created_at"]

    def test_falsy_caller_id_kept(self, client, store):
        store.executescript("CREATE TABLE counters (id INTEGER PRIMARY KEY, label TEXT, created_at TEXT, updated_at TEXT);")
        row = client.table("counters").insert({"id": 0, "label": "zero"}).execute().data
        assert row["id"] == 0
        assert store.fetch_one("SELECT label FROM counters WHERE id = ?", [0]) == {"label": "zero"}

    def test_generated_ids_unique(self, client):
        a = client.table("grants").insert({"title": "a"}).execute().data
        b = client.table("grants").insert({"title": "b"}).execute().data
        assert a["id"] != b["id"]

    def test_batch_returns_list(self, client):
        rows = client.table("grants").insert([{"title": "a"}, {"title": "b"}]).execute().data
        assert [r["title"] for r in rows] == ["a", "b"]

    def test_select_single(self, client):
        row = client.table("grants").insert({"title": "a"}).select().single().execute().data
        assert row["title"] == "a"

    def test_constraint_violation_returns_error(self, client):
        client.table("grants").insert({"id": "g1", "title": "a"}).execute()
        result = client.table("grants").insert({"id": "g1", "title": "b"}).execute()
        assert result.data is None
        assert result.error is not None
        assert "UNIQUE" in result.error.message

    def test_foreign_key_enforced(self, client):
        result = client.table("projects").insert({"title": "x", "user_id": "ghost"}).execute()
        assert result.error is not None

    def test_await(self, client):
        async def create():
            return await client.table("grants").insert({"title": "async"})

        assert run(create()).data["title"] == "async"


class TestUpdate:
    def test_always_restamps_updated_at(self, client, kevin):
        before = kevin["updated_at"]
        result = client.table("users").update({"username": "kevin"}).eq("id", kevin["id"]).execute()
        assert result.error is None
        assert result.data["updated_at"] > before

    def test_restamp_persisted(self, client, store, kevin):
        client.table("users").update({"email": "k@example.com"}).eq("id", kevin["id"]).execute()
        stored = store.fetch_one("SELECT * FROM users WHERE id = ?", [kevin["id"]])
        assert stored["email"] == "k@example.com"
        assert stored["updated_at"] > kevin["updated_at"]
        assert stored["created_at"] == kevin["created_at"]

    def test_encodes_values(self, client, store, sample_projects):
        client.table("projects").update({"tags": ["rust"], "is_featured": True}).eq("id", "proj-1").execute()
        stored = store.fetch_one("SELECT tags, is_featured FROM projects WHERE id = ?", ["proj-1"])
        assert stored == {"tags": '["rust"]', "is_featured": 1}

    def test_echo_without_select(self, client, sample_projects):
        data = client.table("projects").update({"tags": ["rust"]}).eq("id", "proj-1").execute().data
        assert data["tags"] == ["rust"]
        assert set(data) == {"tags", "updated_at"}

    def test_select_reads_back(self, client, sample_projects):
        rows = client.table("projects").update({"upvotes": 0}).eq("user_id", "user-kevin").select().execute().data
        assert len(rows) == 3
        assert all(r["upvotes"] == 0 for r in rows)
        assert all(isinstance(r["tags"], list) for r in rows)

    def test_select_single(self, client, sample_projects):
        row = client.table("projects").update({"title": "demo 2"}).eq("id", "proj-1").select().single().execute().data
        assert row["title"] == "demo 2"
        assert row["tags"] == ["ai", "web"]

    def test_only_matching_rows(self, client, store, sample_projects):
        client.table("projects").update({"upvotes": 99}).eq("id", "proj-2").execute()
        upvotes = {r["id"]: r["upvotes"] for r in store.fetch_all("SELECT id, upvotes FROM projects")}
        assert upvotes == {"proj-1": 10, "proj-2": 99, "proj-3": 7}

    def test_requires_filter(self, client, store, sample_projects):
        result = client.table("projects").update({"upvotes": 0}).execute()
        assert result.error.code == "missing_filters"
        assert store.fetch_one("SELECT upvotes FROM projects WHERE id = ?", ["proj-1"])["upvotes"] == 10


class TestDelete:
    def test_delete(self, client, sample_projects):
        result = client.table("projects").delete().eq("id", "proj-1").execute()
        assert result.data is None
        assert result.error is None
        assert client.table("projects").select("*").eq("id", "proj-1").single().execute().data is None

    def test_zero_matches_is_not_error(self, client, sample_projects):
        result = client.table("projects").delete().eq("id", "nope").execute()
        assert result.data is None
        assert result.error is None

    def test_idempotent(self, client, sample_projects):
        first = client.table("projects").delete().eq("id", "proj-1").execute()
        second = client.table("projects").delete().eq("id", "proj-1").execute()
        assert (first.data, first.error) == (second.data, second.error) == (None, None)
        assert len(client.table("projects").select("*").execute().data) == 2

    def test_delete_with_in(self, client, sample_projects):
        client.table("projects").delete().in_("id", ["proj-1", "proj-2"]).execute()
        assert [r["id"] for r in client.table("projects").select("*").execute().data] == ["proj-3"]

    def test_requires_filter(self, client, sample_projects):
        result = client.table("projects").delete().execute()
        assert result.error.code == "missing_filters"
        assert len(client.table("projects").select("*").execute().data) == 3


class TestEndToEnd:
    def test_project_with_user(self, client):
        kevin = client.table("users").insert({"username": "kevin"}).execute().data
        client.table("projects").insert({"user_id": kevin["id"], "title": "demo", "tags": ["ai", "web"]}).execute()

        result = client.table("projects").select("*, user:users(*)").eq("title", "demo").single().execute()

        assert result.error is None
        project = result.data
        assert project["user"] == client.table("users").select("*").eq("id", kevin["id"]).single().execute().data
        assert project["user"]["username"] == "kevin"
        assert project["user_id"] == kevin["id"]
        assert project["tags"] == ["ai", "web"]

    def test_submission_project_user(self, client, sample_projects):
        grant = client.table("grants").insert({"title": "builders", "amount": 500}).execute().data
        client.table("submissions").insert({"project_id": "proj-1", "grant_id": grant["id"]}).execute()

        row = (
            client.table("submissions")
            .select("*, project:projects(*, user:users(*)), grant:grants(*)")
            .eq("grant_id", grant["id"])
            .single()
            .execute()
            .data
        )

        assert row["grant"]["title"] == "builders"
        assert row["project"]["title"] == "demo"
        assert row["project"]["user"]["username"] == "kevin"
        assert row["project"]["user"]["is_admin"] is True
