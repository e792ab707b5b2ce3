"""
Thin wrapper around the Supabase client that never raises for backend failures.

Every query and auth call returns a :class:`QueryResult` carrying either data
or a :class:`~cafe_shared.errors.BackendError`, so callers check ``error``
explicitly instead of catching library exceptions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from postgrest import APIError
from supabase import AuthError, Client, ClientOptions, create_client

from cafe_shared.config import AppConfig
from cafe_shared.constants import POSTGREST_NO_ROWS
from cafe_shared.errors import BackendError, ConfigurationError
from cafe_shared.logging_config import TableLogAdapter

logger = logging.getLogger(__name__)

AUTH_SCOPE = "auth"


@dataclass
class QueryResult:
    data: Any = None
    error: BackendError | None = None
    count: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def rows(self) -> list[Any]:
        if self.data is None:
            return []
        if isinstance(self.data, list):
            return self.data
        return [self.data]

    def raise_for_error(self, code: str | None = None) -> QueryResult:
        """Raise the carried error, re-tagged for the failing operation."""
        if self.error is not None:
            raise self.error.with_code(code) if code else self.error
        return self


def _backend_error(exc: Exception, table: str) -> BackendError:
    if isinstance(exc, APIError):
        return BackendError(
            exc.message or str(exc),
            table=table,
            backend_code=exc.code,
            details=exc.details,
        )
    if isinstance(exc, AuthError):
        return BackendError(
            getattr(exc, "message", None) or str(exc),
            table=table,
            backend_code=getattr(exc, "code", None),
        )
    return BackendError(str(exc) or exc.__class__.__name__, table=table)


class TableQuery:
    """Chainable, table-scoped query mirroring the PostgREST builder."""

    def __init__(self, builder: Any, table: str, *, single: bool = False):
        self._builder = builder
        self.table = table
        self._single = single
        self._log = TableLogAdapter(logger, table)

    def _chain(self, method: str, *args: Any, **kwargs: Any) -> TableQuery:
        builder = getattr(self._builder, method)(*args, **kwargs)
        return TableQuery(builder, self.table, single=self._single or method == "maybe_single")

    def select(self, columns: str = "*") -> TableQuery:
        return self._chain("select", columns)

    def eq(self, column: str, value: Any) -> TableQuery:
        return self._chain("eq", column, value)

    def in_(self, column: str, values: list[Any]) -> TableQuery:
        return self._chain("in_", column, list(values))

    def order(self, column: str, *, desc: bool = False) -> TableQuery:
        return self._chain("order", column, desc=desc)

    def limit(self, size: int) -> TableQuery:
        return self._chain("limit", size)

    def maybe_single(self) -> TableQuery:
        return self._chain("maybe_single")

    def insert(self, rows: list[dict[str, Any]] | dict[str, Any]) -> TableQuery:
        return self._chain("insert", rows)

    def update(self, patch: dict[str, Any]) -> TableQuery:
        return self._chain("update", patch)

    def delete(self) -> TableQuery:
        return self._chain("delete")

    def execute(self) -> QueryResult:
        try:
            response = self._builder.execute()
        except APIError as exc:
            if self._single and exc.code == POSTGREST_NO_ROWS:
                return QueryResult(data=None)
            error = _backend_error(exc, self.table)
            self._log.error(f"Supabase query failed: {error}")
            return QueryResult(error=error)
        except httpx.HTTPError as exc:
            error = _backend_error(exc, self.table)
            self._log.error(f"Supabase request failed: {error}")
            return QueryResult(error=error)

        # maybe_single() yields no response object when nothing matched
        if response is None:
            return QueryResult(data=None)
        return QueryResult(data=response.data, count=getattr(response, "count", None))


class AuthGateway:
    """Supabase auth calls as result/error pairs."""

    def __init__(self, auth: Any):
        self._auth = auth

    def _call(self, operation: str, func, *args: Any) -> QueryResult:
        try:
            return QueryResult(data=func(*args))
        except (AuthError, httpx.HTTPError) as exc:
            error = _backend_error(exc, AUTH_SCOPE)
            logger.warning(f"Supabase auth {operation} failed: {error}")
            return QueryResult(error=error)

    def sign_in_with_password(self, email: str, password: str) -> QueryResult:
        return self._call(
            "sign_in",
            self._auth.sign_in_with_password,
            {"email": email, "password": password},
        )

    def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> QueryResult:
        credentials: dict[str, Any] = {"email": email, "password": password}
        if metadata:
            credentials["options"] = {"data": metadata}
        return self._call("sign_up", self._auth.sign_up, credentials)

    def get_session(self) -> QueryResult:
        return self._call("get_session", self._auth.get_session)

    def set_session(self, access_token: str, refresh_token: str) -> QueryResult:
        return self._call("set_session", self._auth.set_session, access_token, refresh_token)

    def sign_out(self) -> QueryResult:
        return self._call("sign_out", self._auth.sign_out)


class DataClient:
    """Table-scoped access plus the auth subsystem of one Supabase project."""

    def __init__(self, client: Client | Any):
        self._client = client
        self.auth = AuthGateway(client.auth)

    def from_(self, table: str) -> TableQuery:
        return TableQuery(self._client.table(table), table)

    table = from_


def create_data_client(config: AppConfig) -> DataClient:
    """
    Build a DataClient for the configured project.

    Raises:
        ConfigurationError: when the URL or anon key is absent
    """
    if not config.supabase_configured:
        raise ConfigurationError()

    options = ClientOptions(
        postgrest_client_timeout=config.postgrest_timeout,
        auto_refresh_token=False,
        persist_session=False,
    )
    client = create_client(config.supabase_url, config.supabase_anon_key, options=options)
    return DataClient(client)
