import pytest
from fastapi.testclient import TestClient

from gachadash.deps import get_profile_store
from gachadash.main import app
from gachadash.schemas.common import ErrorCode
from gachadash.services.profile_store import NOT_CONFIGURED_MESSAGE, StoreResult


@pytest.fixture(autouse=True)
def clear_overrides():
    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


class _StubStore:
    configured = True

    def __init__(self):
        self.tags = {"0xabc": ["Whale"]}
        self.calls = []

    async def get_profile(self, wallet):
        if wallet not in self.tags:
            return StoreResult(data=None)
        return StoreResult(data={"wallet_address": wallet, "tags": self.tags[wallet]})

    async def get_tags(self, wallet):
        return StoreResult(data=list(self.tags.get(wallet, [])))

    async def add_tag(self, wallet, tag, author="Admin"):
        self.calls.append(("add_tag", wallet, tag, author))
        self.tags.setdefault(wallet, []).append(tag)
        return StoreResult(data={"wallet_address": wallet, "tags": self.tags[wallet]})

    async def remove_tag(self, wallet, tag):
        if wallet not in self.tags:
            return StoreResult(error="Profile not found", error_code=ErrorCode.PROFILE_NOT_FOUND)
        self.tags[wallet].remove(tag)
        return StoreResult(data={"wallet_address": wallet, "tags": self.tags[wallet]})

    async def update_profile(self, wallet, updates, author="Admin"):
        return StoreResult(data={"wallet_address": wallet, **updates})

    async def get_all_tags(self):
        return StoreResult(data=sorted({t for tags in self.tags.values() for t in tags}))

    async def get_profiles_by_tags(self, tags):
        self.calls.append(("get_profiles_by_tags", tags))
        return StoreResult(data=[])

    async def get_comments(self, wallet):
        return StoreResult(data=[{"id": 1, "comment": "hi", "author": "ops"}])

    async def add_comment(self, wallet, comment, author="Admin"):
        return StoreResult(data={"id": 2, "comment": comment, "author": author})

    async def delete_comment(self, comment_id):
        return StoreResult(data=None)

    async def get_announcements_feed(self, limit=100):
        self.calls.append(("get_announcements_feed", limit))
        return StoreResult(data=[])


class _UnconfiguredStore:
    configured = False

    async def add_tag(self, wallet, tag, author="Admin"):
        return StoreResult(error=NOT_CONFIGURED_MESSAGE, error_code=ErrorCode.STORE_NOT_CONFIGURED)

    async def get_tags(self, wallet):
        return StoreResult(data=[])


def test_get_tags(client):
    app.dependency_overrides[get_profile_store] = lambda: _StubStore()

    response = client.get("/api/v1/profiles/0xabc/tags")

    assert response.status_code == 200
    assert response.json()["data"]["tags"] == ["Whale"]


def test_add_tag(client):
    store = _StubStore()
    app.dependency_overrides[get_profile_store] = lambda: store

    response = client.post(
        "/api/v1/profiles/0xnew/tags", json={"tag": "  Bot  ", "author": "ops"}
    )

    assert response.status_code == 200
    assert response.json()["data"]["profile"]["tags"] == ["Bot"]
    assert store.calls == [("add_tag", "0xnew", "Bot", "ops")]


def test_add_blank_tag_is_rejected(client):
    app.dependency_overrides[get_profile_store] = lambda: _StubStore()

    response = client.post("/api/v1/profiles/0xabc/tags", json={"tag": "   "})

    assert response.status_code == 422
    assert response.json()["success"] is False


def test_add_tag_store_not_configured(client):
    app.dependency_overrides[get_profile_store] = lambda: _UnconfiguredStore()

    response = client.post("/api/v1/profiles/0xabc/tags", json={"tag": "Whale"})

    assert response.status_code == 503
    body = response.json()
    assert body["error"]["code"] == ErrorCode.STORE_NOT_CONFIGURED.value
    assert body["error"]["message"] == NOT_CONFIGURED_MESSAGE


def test_remove_tag(client):
    app.dependency_overrides[get_profile_store] = lambda: _StubStore()

    response = client.delete("/api/v1/profiles/0xabc/tags/Whale")

    assert response.status_code == 200
    assert response.json()["data"]["profile"]["tags"] == []


def test_remove_tag_missing_profile(client):
    app.dependency_overrides[get_profile_store] = lambda: _StubStore()

    response = client.delete("/api/v1/profiles/0xnone/tags/Whale")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == ErrorCode.PROFILE_NOT_FOUND.value


def test_update_profile(client):
    app.dependency_overrides[get_profile_store] = lambda: _StubStore()

    response = client.put(
        "/api/v1/profiles/0xabc", json={"updates": {"notes": "vip"}}
    )

    assert response.status_code == 200
    assert response.json()["data"]["profile"]["notes"] == "vip"


def test_get_all_tags(client):
    app.dependency_overrides[get_profile_store] = lambda: _StubStore()

    response = client.get("/api/v1/tags")

    assert response.json()["data"]["tags"] == ["Whale"]


def test_get_profiles_by_tags_splits_query(client):
    store = _StubStore()
    app.dependency_overrides[get_profile_store] = lambda: store

    response = client.get("/api/v1/tags/profiles?tags=Whale,%20Bot,,")

    assert response.status_code == 200
    assert store.calls == [("get_profiles_by_tags", ["Whale", "Bot"])]


def test_comments(client):
    app.dependency_overrides[get_profile_store] = lambda: _StubStore()

    listed = client.get("/api/v1/profiles/0xabc/comments")
    added = client.post(
        "/api/v1/profiles/0xabc/comments", json={"comment": "big spender"}
    )
    deleted = client.delete("/api/v1/comments/2")

    assert listed.json()["data"]["comments"][0]["comment"] == "hi"
    assert added.json()["data"]["comment"]["author"] == "Admin"
    assert deleted.json()["data"] == {"deleted": "2"}


def test_announcements_limit(client):
    store = _StubStore()
    app.dependency_overrides[get_profile_store] = lambda: store

    response = client.get("/api/v1/announcements?limit=5")

    assert response.status_code == 200
    assert store.calls == [("get_announcements_feed", 5)]


def test_store_status(client):
    app.dependency_overrides[get_profile_store] = lambda: _UnconfiguredStore()

    response = client.get("/api/v1/store/status")

    body = response.json()
    assert body["data"]["configured"] is False
    assert isinstance(body["data"]["defaultTags"], list)
