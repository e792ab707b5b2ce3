"""
Shared fixtures: an in-memory stand-in for the Supabase client and app/console builders.
"""

from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any

import pytest
from postgrest import APIError
from supabase import AuthApiError

from cafe_console.app import create_app
from cafe_console.context import ConsoleContext
from cafe_shared.config import AppConfig, TableNames
from cafe_shared.session_store import MemoryStorage, SessionStore
from cafe_shared.supabase.client import DataClient


class FakeResponse:
    def __init__(self, data: Any):
        self.data = data
        self.count = None


class FakeQuery:
    """Records one chained PostgREST call and evaluates it against FakeDatabase."""

    def __init__(self, db: FakeDatabase, table: str):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload: Any = None
        self.filters: list[tuple[str, str, Any]] = []
        self.order_by: tuple[str, bool] | None = None
        self.limit_to: int | None = None
        self.single = False

    def select(self, columns: str = "*"):
        return self

    def eq(self, column: str, value: Any):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column: str, values: list[Any]):
        self.filters.append(("in", column, list(values)))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def limit(self, size: int):
        self.limit_to = size
        return self

    def maybe_single(self):
        self.single = True
        return self

    def insert(self, rows):
        self.action = "insert"
        self.payload = rows if isinstance(rows, list) else [rows]
        return self

    def update(self, patch: dict[str, Any]):
        self.action = "update"
        self.payload = patch
        return self

    def delete(self):
        self.action = "delete"
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        for op, column, value in self.filters:
            if op == "eq" and row.get(column) != value:
                return False
            if op == "in" and row.get(column) not in value:
                return False
        return True

    def execute(self):
        self.db.log.append(
            {
                "table": self.table,
                "action": self.action,
                "payload": copy.deepcopy(self.payload),
                "filters": list(self.filters),
                "order": self.order_by,
                "limit": self.limit_to,
            }
        )
        failure = self.db.failures.get((self.table, self.action))
        if failure is not None:
            raise failure

        rows = self.db.tables.setdefault(self.table, [])
        if self.action == "insert":
            created = []
            for row in self.payload:
                record = dict(row)
                id_column = self.db.id_columns.get(self.table)
                if id_column and record.get(id_column) is None:
                    self.db.sequence += 1
                    record[id_column] = self.db.sequence
                rows.append(record)
                created.append(dict(record))
            return FakeResponse(created)

        matched = [row for row in rows if self._matches(row)]
        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])
        if self.action == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return FakeResponse([dict(row) for row in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(
                matched,
                key=lambda row: (row.get(column) is None, str(row.get(column))),
                reverse=desc,
            )
        if self.limit_to is not None:
            matched = matched[: self.limit_to]
        if self.single:
            if not matched:
                return None
            if len(matched) > 1:
                raise APIError(
                    {"message": "multiple rows returned", "code": "21000", "details": None}
                )
            return FakeResponse(dict(matched[0]))
        return FakeResponse([dict(row) for row in matched])


class FakeAuth:
    def __init__(self):
        self.users: dict[str, dict[str, Any]] = {}
        self.calls: list[str] = []
        self.restored: tuple[str, str] | None = None
        self.fail_sign_out = False

    def _response(self, email: str):
        user = self.users[email]
        return SimpleNamespace(
            user=SimpleNamespace(
                id=user["id"],
                email=email,
                user_metadata=user["metadata"],
                created_at="2024-01-19T08:00:00+00:00",
            ),
            session=SimpleNamespace(access_token=f"access-{user['id']}", refresh_token="refresh"),
        )

    def sign_in_with_password(self, credentials: dict[str, str]):
        self.calls.append("sign_in")
        user = self.users.get(credentials["email"])
        if user is None or user["password"] != credentials["password"]:
            raise AuthApiError("Invalid login credentials", 400, "invalid_credentials")
        return self._response(credentials["email"])

    def sign_up(self, credentials: dict[str, Any]):
        self.calls.append("sign_up")
        email = credentials["email"]
        if email in self.users:
            raise AuthApiError("User already registered", 422, "user_already_exists")
        self.users[email] = {
            "id": f"user-{len(self.users) + 1}",
            "password": credentials["password"],
            "metadata": credentials.get("options", {}).get("data", {}),
        }
        return self._response(email)

    def get_session(self):
        self.calls.append("get_session")
        return None

    def set_session(self, access_token: str, refresh_token: str):
        self.calls.append("set_session")
        self.restored = (access_token, refresh_token)
        return None

    def sign_out(self):
        self.calls.append("sign_out")
        if self.fail_sign_out:
            raise AuthApiError("Session expired", 401, "session_expired")


class FakeDatabase:
    """In-memory tables plus the table()/auth surface of a Supabase client."""

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.id_columns: dict[str, str] = {}
        self.log: list[dict[str, Any]] = []
        self.sequence = 100
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, rows: list[dict[str, Any]], id_column: str | None = None):
        self.tables[table] = [dict(row) for row in rows]
        if id_column:
            self.id_columns[table] = id_column

    def fail(self, table: str, action: str = "select", code: str = "42P01", message: str = "boom"):
        self.failures[(table, action)] = APIError(
            {"message": message, "code": code, "details": None, "hint": None}
        )

    def calls(self, table: str, action: str | None = None) -> list[dict[str, Any]]:
        return [
            entry
            for entry in self.log
            if entry["table"] == table and (action is None or entry["action"] == action)
        ]


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def data_client(fake_db) -> DataClient:
    return DataClient(fake_db)


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        app_name="cafe-console-test",
        supabase_url="https://example.supabase.co",
        supabase_anon_key="anon-key",
        auth_mode="table",
        tables=TableNames(),
        datetime_format="%Y-%m-%d %H:%M",
        secret_key="test-secret",
    )


@pytest.fixture
def navigator():
    calls: list[str] = []

    def navigate(url: str) -> None:
        calls.append(url)

    navigate.calls = calls
    return navigate


@pytest.fixture
def session_store(navigator) -> SessionStore:
    return SessionStore([MemoryStorage()], navigator=navigator)


@pytest.fixture
def console(config, session_store, data_client) -> ConsoleContext:
    return ConsoleContext(config, session_store, client_factory=lambda _config: data_client)


@pytest.fixture
def signed_in_console(console) -> ConsoleContext:
    console.session_store.cache(
        {"id": 1, "cafe_id": 7, "name": "Ada Lovelace", "email": "ada@example.com"}
    )
    return console


@pytest.fixture
def app(config, data_client):
    app = create_app(config, client_factory=lambda _config: data_client)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


ADMIN_ROW = {
    "id": 1,
    "cafe_id": 7,
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "pwd": "secret-pass",
    "created_at": "2024-01-19T08:00:00+00:00",
}


@pytest.fixture
def admin_row() -> dict[str, Any]:
    return dict(ADMIN_ROW)


@pytest.fixture
def signed_in_client(client, fake_db):
    fake_db.seed("admin", [ADMIN_ROW], id_column="id")
    response = client.post(
        "/auth/login", json={"email": "ada@example.com", "password": "secret-pass"}
    )
    assert response.status_code == 200
    return client
