import json

import pytest
from flask import Flask
from flask import session as flask_session
from redis.exceptions import ConnectionError as RedisConnectionError

from cafe_shared.constants import SESSION_STORAGE_KEY
from cafe_shared.session_store import (
    FlaskSessionStorage,
    MemoryStorage,
    RedisStorage,
    SessionStore,
    has_valid_identifier,
    serialize_admin,
)


class BrokenStorage(MemoryStorage):
    name = "broken"

    def set_item(self, key, value):
        raise RuntimeError("storage disabled")


class FakeRedis:
    def __init__(self, fail=False):
        self.values = {}
        self.ttls = {}
        self.fail = fail

    def get(self, key):
        if self.fail:
            raise RedisConnectionError("down")
        value = self.values.get(key)
        return value.encode("utf-8") if value is not None else None

    def setex(self, key, ttl, value):
        if self.fail:
            raise RedisConnectionError("down")
        self.values[key] = value
        self.ttls[key] = ttl

    def delete(self, key):
        if self.fail:
            raise RedisConnectionError("down")
        self.values.pop(key, None)


ADMIN = {
    "id": 12,
    "cafe_id": 3,
    "name": "Grace Hopper",
    "email": "grace@example.com",
    "created_at": "2024-01-01T00:00:00Z",
    "pwd": "hunter2",
}


class TestCacheAndGet:
    def test_roundtrip_populates_both_aliases(self, session_store):
        session_store.cache(ADMIN)
        session = session_store.get()

        assert session["admin"]["id"] == 12
        assert session["admin"]["admin_id"] == 12
        assert session["admin"]["email"] == "grace@example.com"
        assert session["admin"]["cafe_id"] == 3

    def test_password_never_persisted(self, session_store):
        session_store.cache(ADMIN)
        stored = session_store.storage.get_item(SESSION_STORAGE_KEY)
        assert "hunter2" not in stored
        assert "pwd" not in stored

    def test_admin_id_alias_is_accepted_as_source(self, session_store):
        session_store.cache({"admin_id": "abc", "name": "Ops"})
        assert session_store.get()["admin"]["id"] == "abc"

    def test_record_without_identifier_clears_store(self, session_store):
        session_store.cache(ADMIN)
        session_store.cache({"name": "No id"})
        assert session_store.get() is None

    def test_nested_session_record_is_flattened(self, session_store):
        session_store.cache({"admin": {"id": 5, "name": "Nested"}, "access_token": "tok"})
        session = session_store.get()
        assert session["admin"]["name"] == "Nested"
        assert session["access_token"] == "tok"

    def test_malformed_json_is_cleared(self, session_store):
        storage = session_store.storage
        storage.set_item(SESSION_STORAGE_KEY, "{not json")
        assert session_store.get() is None
        assert storage.get_item(SESSION_STORAGE_KEY) is None

    def test_clear(self, session_store):
        session_store.cache(ADMIN)
        session_store.clear()
        assert session_store.get() is None


class TestRequire:
    def test_returns_valid_session(self, session_store, navigator):
        session_store.cache(ADMIN)
        assert session_store.require()["admin"]["admin_id"] == 12
        assert navigator.calls == []

    def test_absent_session_redirects(self, session_store, navigator):
        assert session_store.require() is None
        assert navigator.calls == ["/auth/login"]

    @pytest.mark.parametrize(
        "stored",
        [
            "{broken",
            json.dumps({"admin": {"id": ""}}),
            json.dumps({"admin": {"id": True}}),
            json.dumps({"admin": "oops"}),
            json.dumps(["list"]),
        ],
    )
    def test_invalid_session_redirects_and_clears(self, session_store, navigator, stored):
        session_store.storage.set_item(SESSION_STORAGE_KEY, stored)
        assert session_store.require() is None
        assert navigator.calls == ["/auth/login"]
        assert session_store.storage.get_item(SESSION_STORAGE_KEY) is None

    def test_require_without_navigator(self):
        store = SessionStore([MemoryStorage()])
        assert store.require() is None


class TestStorageDetection:
    def test_falls_through_to_first_working_backend(self):
        memory = MemoryStorage()
        store = SessionStore([BrokenStorage(), memory])
        assert store.storage is memory

    def test_no_backend_disables_sessions(self, navigator):
        store = SessionStore([BrokenStorage()], navigator=navigator)
        store.cache(ADMIN)
        assert store.get() is None
        assert store.require() is None
        assert navigator.calls == ["/auth/login"]

    def test_detection_runs_once(self):
        class CountingStorage(MemoryStorage):
            writes = 0

            def set_item(self, key, value):
                if key == "__t":
                    CountingStorage.writes += 1
                super().set_item(key, value)

        store = SessionStore([CountingStorage()])
        store.cache(ADMIN)
        store.get()
        store.clear()
        assert CountingStorage.writes == 1


class TestRedisStorage:
    def test_roundtrip_with_ttl(self):
        redis_client = FakeRedis()
        store = SessionStore([RedisStorage(redis_client, "client-1", ttl_seconds=60)])
        store.cache(ADMIN)

        assert store.get()["admin"]["id"] == 12
        key = f"cafe-console:storage:client-1:{SESSION_STORAGE_KEY}"
        assert redis_client.ttls[key] == 60

    def test_unreachable_redis_is_skipped(self):
        memory = MemoryStorage()
        store = SessionStore([RedisStorage(FakeRedis(fail=True), "client-1"), memory])
        assert store.storage is memory

    def test_missing_client_id_is_skipped(self):
        memory = MemoryStorage()
        store = SessionStore([RedisStorage(FakeRedis(), None), memory])
        assert store.storage is memory


def test_flask_session_storage():
    app = Flask(__name__)
    app.secret_key = "test"
    with app.test_request_context("/"):
        store = SessionStore([FlaskSessionStorage()])
        store.cache(ADMIN)
        assert store.storage.name == "flask-session"
        assert store.get()["admin"]["admin_id"] == 12


def test_serialize_admin_and_identifier_checks():
    assert serialize_admin(None) is None
    assert serialize_admin({"name": "x"}) is None
    assert has_valid_identifier({"admin": {"admin_id": 0}})
    assert not has_valid_identifier({"admin": {"id": "  "}})
    assert not has_valid_identifier(None)


def test_flask_session_detection_leaves_cookie_untouched():
    app = Flask(__name__)
    app.secret_key = "test"
    with app.test_request_context("/"):
        store = SessionStore([FlaskSessionStorage(), MemoryStorage()])
        assert store.storage.name == "flask-session"
        assert store.get() is None
        assert flask_session.modified is False
        assert "__t" not in flask_session


def test_flask_session_skipped_without_secret_or_request():
    memory = MemoryStorage()
    assert SessionStore([FlaskSessionStorage(), memory]).storage is memory

    app = Flask(__name__)
    with app.test_request_context("/"):
        memory = MemoryStorage()
        assert SessionStore([FlaskSessionStorage(), memory]).storage is memory


class TestZeroIdentifier:
    def test_serialize_keeps_zero_id(self):
        payload = serialize_admin({"id": 0, "name": "Root"})
        assert payload["id"] == 0
        assert payload["admin_id"] == 0

    def test_admin_id_zero_wins_over_id(self):
        assert serialize_admin({"admin_id": 0, "id": 9})["id"] == 0

    def test_zero_id_roundtrip_passes_require(self, session_store, navigator):
        session_store.cache({"id": 0, "cafe_id": 3, "name": "Root"})
        session = session_store.require()

        assert session["admin"]["id"] == 0
        assert has_valid_identifier(session)
        assert navigator.calls == []
