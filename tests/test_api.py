import pytest
from httpx import ASGITransport, AsyncClient

import pytest_asyncio

from gittree.api.main import app, service
from gittree.dag.builder import build_store
from gittree.dag.models import CommitRecord, FilterOptions, Reference
from gittree.errors import GitCommandError

from conftest import H1, H2, H3

# Fixture for async client
@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

class FakeRepository:
    def __init__(self, log):
        self.log = log
        self.refs = [Reference("refs/heads/main", H1)]
        self.filters = []
        self.calls = []
        self.fail_with = None

    def load(self, filter=None):
        self.filters.append(filter)
        lines = self.log.splitlines()
        if filter is not None and filter.max_commits:
            lines = lines[: filter.max_commits]
        return build_store("\n".join(lines), self.refs)

    def references(self):
        return list(self.refs)

    def commit_details(self, hash):
        return CommitRecord(hash=hash, short_hash=hash[:7], files=["app.py"],
                            stats={"files_changed": 1, "insertions": 2, "deletions": 1})

    def _mutate(self, *call):
        if self.fail_with is not None:
            raise self.fail_with
        self.calls.append(call)

    def checkout(self, hash):
        self._mutate("checkout", hash)

    def reset_hard(self, hash):
        self._mutate("reset", hash)

    def cherry_pick(self, hash):
        self._mutate("cherry-pick", hash)

    def revert(self, hash):
        self._mutate("revert", hash)

    def create_branch(self, name, hash):
        self._mutate("branch", name, hash)
        self.refs.append(Reference(f"refs/heads/{name}", hash))

    def create_tag(self, name, hash):
        self._mutate("tag", name, hash)
        self.refs.append(Reference(f"refs/tags/{name}", hash))

# Point the global service at an in-memory repository
@pytest.fixture
def fake_repo(linear_log):
    repo = FakeRepository(linear_log)
    service._repository = repo
    service.controller = None
    service.filter = FilterOptions()
    return repo

@pytest.mark.asyncio
async def test_health(client, fake_repo):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"

@pytest.mark.asyncio
async def test_get_commits(client, fake_repo):
    response = await client.get("/api/commits")
    assert response.status_code == 200
    data = response.json()
    assert [c["hash"] for c in data] == [H1, H2, H3]
    assert data[0]["refs"] == ["refs/heads/main"]
    assert data[0]["graph"] == [{"kind": "vertical", "column": 0, "is_merge_marker": False}]

    response = await client.get("/api/commits", params={"limit": 1, "skip": 1})
    assert [c["hash"] for c in response.json()] == [H2]

@pytest.mark.asyncio
async def test_get_commit_detail(client, fake_repo):
    response = await client.get(f"/api/commits/{H2}")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Second"
    assert data["files"] == ["app.py"]
    assert data["stats"]["insertions"] == 2

@pytest.mark.asyncio
async def test_get_commit_not_found(client, fake_repo):
    response = await client.get("/api/commits/deadbeef")
    assert response.status_code == 404

@pytest.mark.asyncio
async def test_get_refs(client, fake_repo):
    response = await client.get("/api/refs")
    assert response.status_code == 200
    assert response.json() == [{"name": "refs/heads/main", "target": H1}]

@pytest.mark.asyncio
async def test_navigation_events(client, fake_repo):
    response = await client.get("/api/session")
    assert response.json()["selected_index"] == 0

    await client.post("/api/session/events", json={"event": "move-down"})
    response = await client.post("/api/session/events", json={"event": "jump-to-parent"})
    assert response.status_code == 200
    data = response.json()
    assert data["selection"]["selected_index"] == 2
    assert data["selection"]["selected_hash"] == H3
    assert data["result"] is None

@pytest.mark.asyncio
async def test_unknown_event_rejected(client, fake_repo):
    response = await client.post("/api/session/events", json={"event": "teleport"})
    assert response.status_code == 422

@pytest.mark.asyncio
async def test_branch_event_reloads_refs(client, fake_repo):
    response = await client.post("/api/session/events", json={"event": "branch", "name": "topic"})
    data = response.json()
    assert data["result"]["ok"]
    assert fake_repo.calls == [("branch", "topic", H1)]

    response = await client.get("/api/commits", params={"limit": 1})
    assert response.json()[0]["refs"] == ["refs/heads/main", "refs/heads/topic"]

@pytest.mark.asyncio
async def test_failed_command_is_reported(client, fake_repo):
    fake_repo.fail_with = GitCommandError(["reset", "--hard", H1], 1, "fatal: cannot lock ref")
    response = await client.post("/api/session/events", json={"event": "reset"})
    assert response.status_code == 200
    result = response.json()["result"]
    assert not result["ok"]
    assert "cannot lock ref" in result["message"]

@pytest.mark.asyncio
async def test_open_details_event(client, fake_repo):
    response = await client.post("/api/session/events", json={"event": "open-details"})
    result = response.json()["result"]
    assert result["details"]["files"] == ["app.py"]

@pytest.mark.asyncio
async def test_render(client, fake_repo):
    await client.post("/api/session/events", json={"event": "move-down"})
    response = await client.get("/api/render", params={"height": 2})
    data = response.json()
    assert data["mode"] == "graph"
    assert len(data["lines"]) == 2
    assert data["selected_row"] == 1
    assert data["lines"][1]["text"].startswith("| 2222222 Alice")

    await client.post("/api/session/events", json={"event": "toggle-help"})
    response = await client.get("/api/render")
    assert response.json()["mode"] == "help"

@pytest.mark.asyncio
async def test_refresh_with_filter(client, fake_repo):
    response = await client.post("/api/refresh", json={"author": "alice", "max_commits": 2})
    assert response.status_code == 200
    assert response.json() == {"commits": 2}
    assert fake_repo.filters[-1].author == "alice"

    response = await client.get("/api/commits")
    assert len(response.json()) == 2

@pytest.mark.asyncio
async def test_git_error_becomes_500(client, fake_repo):
    def broken(filter=None):
        raise GitCommandError(["log"], 128, "fatal: bad revision")

    fake_repo.load = broken
    response = await client.get("/api/commits")
    assert response.status_code == 500
    assert "bad revision" in response.json()["detail"]

@pytest.mark.asyncio
async def test_reload_failure_after_command_keeps_success(client, fake_repo):
    await client.get("/api/session")

    def broken(filter=None):
        raise GitCommandError(["log"], 128, "fatal: bad object")

    fake_repo.load = broken
    response = await client.post("/api/session/events", json={"event": "cherry-pick"})
    assert response.status_code == 200
    result = response.json()["result"]
    assert result["ok"]
    assert "reload failed" in result["message"]
    assert "bad object" in result["message"]
    assert fake_repo.calls == [("cherry-pick", H1)]
