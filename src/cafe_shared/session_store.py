"""
Cached admin identity used to gate the dashboard pages.

The serialized session lives under a single storage key. Storage is detected
once per store instance: the browser-session cookie first, then a persistent
Redis fallback keyed by a client cookie.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol

from flask import current_app, has_request_context
from flask import session as flask_session
from redis import Redis
from redis.exceptions import RedisError

from cafe_shared.constants import SESSION_STORAGE_KEY, SESSION_TEST_KEY
from cafe_shared.formatting import first_identifier

logger = logging.getLogger(__name__)

# Fields kept in the cached record; credentials never leave the auth flow.
SESSION_FIELDS = ("cafe_id", "name", "email", "created_at")
TOKEN_FIELDS = ("access_token", "refresh_token", "user_id")


class StorageBackend(Protocol):
    name: str

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def is_available(self) -> bool: ...


class MemoryStorage:
    """Process-local storage, used by tests and scripts."""

    name = "memory"

    def __init__(self, initial: Mapping[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def is_available(self) -> bool:
        return _write_check(self)


class FlaskSessionStorage:
    """Browser-session scoped storage backed by Flask's signed session cookie."""

    name = "flask-session"

    def get_item(self, key: str) -> str | None:
        return flask_session.get(key)

    def set_item(self, key: str, value: str) -> None:
        flask_session.permanent = False
        flask_session[key] = value

    def remove_item(self, key: str) -> None:
        flask_session.pop(key, None)

    def is_available(self) -> bool:
        # Read-only so an untouched session is never re-issued.
        return has_request_context() and bool(current_app.secret_key)


class RedisStorage:
    """Persistent storage keyed by a per-browser client id."""

    name = "redis"

    def __init__(
        self,
        client: Redis,
        client_id: str | None,
        namespace: str = "cafe-console:storage",
        ttl_seconds: int = 14400,
    ):
        self._client = client
        self._client_id = client_id
        self._namespace = namespace
        self._ttl = ttl_seconds

    def _key(self, key: str) -> str:
        if not self._client_id:
            raise RuntimeError("RedisStorage requires a client id")
        return f"{self._namespace}:{self._client_id}:{key}"

    def get_item(self, key: str) -> str | None:
        value = self._client.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set_item(self, key: str, value: str) -> None:
        self._client.setex(self._key(key), self._ttl, value)

    def remove_item(self, key: str) -> None:
        self._client.delete(self._key(key))

    def is_available(self) -> bool:
        return _write_check(self)


def _write_check(backend: StorageBackend) -> bool:
    backend.set_item(SESSION_TEST_KEY, "1")
    backend.remove_item(SESSION_TEST_KEY)
    return True


def _is_available(backend: StorageBackend) -> bool:
    try:
        return backend.is_available()
    except (RuntimeError, RedisError, OSError) as exc:
        logger.debug(f"Storage backend '{backend.name}' unavailable: {exc}")
        return False


def serialize_admin(admin: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """
    Minimal, stable session payload.

    The identifier is written under both ``id`` and ``admin_id``. Returns
    None when the record carries no identifier.
    """
    if not isinstance(admin, Mapping):
        return None
    admin_id = first_identifier(admin.get("admin_id"), admin.get("id"))
    if admin_id is None:
        return None

    record: dict[str, Any] = {"id": admin_id, "admin_id": admin_id}
    for key in SESSION_FIELDS:
        record[key] = admin.get(key)
    payload: dict[str, Any] = {"admin": record}
    for key in TOKEN_FIELDS:
        if admin.get(key):
            payload[key] = admin[key]
    return payload


def has_valid_identifier(session: Any) -> bool:
    if not isinstance(session, Mapping):
        return False
    admin = session.get("admin")
    if not isinstance(admin, Mapping):
        return False
    for key in ("id", "admin_id"):
        value = admin.get(key)
        if isinstance(value, str) and value.strip():
            return True
        if isinstance(value, int) and not isinstance(value, bool):
            return True
    return False


class SessionStore:
    """
    cache/get/clear/require over the first working storage backend.

    ``navigator`` receives the login URL when ``require`` finds no usable
    session; it never raises back into the caller.
    """

    def __init__(
        self,
        backends: Iterable[StorageBackend],
        navigator: Callable[[str], None] | None = None,
        login_url: str = "/auth/login",
        storage_key: str = SESSION_STORAGE_KEY,
    ):
        self._backends = list(backends)
        self._navigator = navigator
        self.login_url = login_url
        self.storage_key = storage_key
        self._storage: StorageBackend | None = None
        self._detected = False

    @property
    def storage(self) -> StorageBackend | None:
        if not self._detected:
            self._detected = True
            self._storage = next(
                (backend for backend in self._backends if _is_available(backend)), None
            )
            if self._storage is None:
                logger.warning("No session storage backend available; sessions disabled")
        return self._storage

    def cache(self, record: Mapping[str, Any] | None) -> None:
        store = self.storage
        if store is None:
            return
        source = record
        if isinstance(record, Mapping) and isinstance(record.get("admin"), Mapping):
            source = {**record, **record["admin"]}
        serialized = serialize_admin(source)
        if serialized is None:
            store.remove_item(self.storage_key)
            return
        try:
            store.set_item(self.storage_key, json.dumps(serialized, default=str))
        except (RuntimeError, RedisError, OSError) as exc:
            logger.warning(f"Unable to persist admin session details: {exc}")

    def get(self) -> dict[str, Any] | None:
        store = self.storage
        if store is None:
            return None
        try:
            cached = store.get_item(self.storage_key)
        except (RuntimeError, RedisError, OSError) as exc:
            logger.warning(f"Unable to read cached admin session: {exc}")
            return None
        if not cached:
            return None
        try:
            parsed = json.loads(cached)
        except (TypeError, ValueError) as exc:
            logger.warning(f"Unable to parse cached admin session, clearing it: {exc}")
            self.clear()
            return None
        return parsed if isinstance(parsed, dict) else None

    def clear(self) -> None:
        store = self.storage
        if store is None:
            return
        try:
            store.remove_item(self.storage_key)
        except (RuntimeError, RedisError, OSError) as exc:
            logger.warning(f"Unable to clear cached admin session: {exc}")

    def require(self) -> dict[str, Any] | None:
        session = self.get()
        if has_valid_identifier(session):
            return session
        self.clear()
        if self._navigator is not None:
            self._navigator(self.login_url)
        return None
