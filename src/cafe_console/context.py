"""
Per-request console context.

Each request gets its own data client handle and session store, built from
the app-level configuration, and every service receives it explicitly.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any

from flask import Flask, current_app, g, request
from redis import Redis

from cafe_shared.config import AppConfig
from cafe_shared.constants import CLIENT_ID_COOKIE, AuthMode
from cafe_shared.errors import ConfigurationError
from cafe_shared.reconciler import SCHEMAS, TableMapping
from cafe_shared.session_store import (
    FlaskSessionStorage,
    RedisStorage,
    SessionStore,
    StorageBackend,
)
from cafe_shared.supabase.client import DataClient, create_data_client

logger = logging.getLogger(__name__)

EXTENSION_KEY = "cafe_console"

ClientFactory = Callable[[AppConfig], DataClient]


class PendingRedirect:
    """Navigator that records where ``SessionStore.require`` wants to send the user."""

    def __init__(self):
        self.location: str | None = None

    def __call__(self, url: str) -> None:
        self.location = url


class ConsoleContext:
    """Data client + session store for one request."""

    def __init__(
        self,
        config: AppConfig,
        session_store: SessionStore,
        client_factory: ClientFactory | None = None,
        navigator: PendingRedirect | None = None,
    ):
        self.config = config
        self.session_store = session_store
        self.navigator = navigator or PendingRedirect()
        self._client_factory = client_factory or create_data_client
        self._client: DataClient | None = None

    @property
    def configured(self) -> bool:
        return self.config.supabase_configured

    @property
    def auth_mode(self) -> AuthMode:
        return AuthMode(self.config.auth_mode)

    def require_client(self) -> DataClient:
        """
        Return the data client, creating it on first use.

        Raises:
            ConfigurationError: when Supabase credentials are absent
        """
        if self._client is None:
            if not self.configured:
                raise ConfigurationError()
            self._client = self._client_factory(self.config)
            if self.auth_mode is AuthMode.SUPABASE:
                self._restore_auth_session(self._client)
        return self._client

    def _restore_auth_session(self, client: DataClient) -> None:
        cached = self.session_store.get() or {}
        access_token = cached.get("access_token")
        refresh_token = cached.get("refresh_token")
        if not access_token or not refresh_token:
            return
        result = client.auth.set_session(access_token, refresh_token)
        if result.error:
            logger.warning(f"Unable to restore Supabase auth session: {result.error}")

    def mapping(self, table_key: str) -> TableMapping:
        """Fresh table mapping owned by the calling controller."""
        tables = self.config.tables
        table = {
            "orders": tables.orders,
            "order_items": tables.order_items,
            "menu_items": tables.items,
            "menus": tables.menus,
            "admin": tables.admin,
            "stores": tables.stores,
            "activity": tables.activity,
        }[table_key]
        return TableMapping(table, SCHEMAS[table_key], self.config.overrides_for(table_key))


def _storage_backends(app: Flask, config: AppConfig) -> list[StorageBackend]:
    backends: list[StorageBackend] = [FlaskSessionStorage()]
    redis_client: Redis | None = app.extensions[EXTENSION_KEY].get("redis")
    if redis_client is not None:
        client_id = request.cookies.get(CLIENT_ID_COOKIE)
        if not client_id:
            client_id = uuid.uuid4().hex
            g.new_client_id = client_id
        backends.append(
            RedisStorage(redis_client, client_id, ttl_seconds=config.session_ttl_seconds)
        )
    return backends


def build_request_context(app: Flask) -> ConsoleContext:
    settings: dict[str, Any] = app.extensions[EXTENSION_KEY]
    config: AppConfig = settings["config"]
    navigator = PendingRedirect()
    store = SessionStore(
        _storage_backends(app, config),
        navigator=navigator,
        login_url=settings.get("login_url", "/auth/login"),
    )
    return ConsoleContext(
        config,
        store,
        client_factory=settings.get("client_factory"),
        navigator=navigator,
    )


def get_console() -> ConsoleContext:
    console = getattr(g, "console", None)
    if console is None:
        console = build_request_context(current_app)
        g.console = console
    return console
