"""
Utilities to centralize configuration handling for the café admin console.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field

# Values shipped in the sample `supabase_config` that must never reach the client.
PLACEHOLDER_URLS = {"YOUR_SUPABASE_URL", "https://your-project-id.supabase.co"}
PLACEHOLDER_KEYS = {"YOUR_SUPABASE_ANON_KEY"}

AUTH_MODES = {"table", "supabase"}


@dataclass(frozen=True)
class TableNames:
    """Backend table names, overridable per deployment."""

    orders: str = "orders"
    order_items: str = "order_item"
    items: str = "item"
    menus: str = "menu"
    admin: str = "admin"
    stores: str = "stores"
    activity: str = "activity_logs"


@dataclass
class AppConfig:
    """Simple container for application level settings."""

    app_name: str
    # Supabase
    supabase_url: str
    supabase_anon_key: str
    auth_mode: str
    tables: TableNames
    # Per-table column pins, e.g. {"menu_items": {"price": "unit_price"}}
    column_overrides: dict[str, dict[str, str]] = field(default_factory=dict)
    # Console behaviour
    orders_limit: int = 100
    activity_limit: int = 10
    datetime_format: str = "%b %d, %Y %H:%M"
    postgrest_timeout: int = 10
    # App settings
    secret_key: str = "super-secret-change-me"
    log_level: str = "INFO"
    debug_mode: bool = False
    cors_allowed_origins: list[str] = field(default_factory=list)
    # Session storage
    redis_url: str = ""
    session_ttl_seconds: int = 14400

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    def overrides_for(self, table_key: str) -> dict[str, str]:
        return dict(self.column_overrides.get(table_key, {}))


def _read_env(name: str, default: str | None = None) -> str:
    """
    Internal helper to fetch environment variables with support for defaults.
    """
    value = os.getenv(name)
    if value is None:
        if default is None:
            raise RuntimeError(f"Missing required environment variable '{name}'")
        value = default
    return value


def read_bool(name: str, default: str = "false") -> bool:
    value = _read_env(name, default)
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_int(name: str, default: int) -> int:
    raw = _read_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def sanitize_credential(value: str | None, placeholders: set[str]) -> str:
    """Return the trimmed credential, or an empty string for blanks and placeholders."""
    if not isinstance(value, str):
        return ""
    trimmed = value.strip()
    if not trimmed or trimmed in placeholders:
        return ""
    return trimmed


def parse_column_overrides(raw: str) -> dict[str, dict[str, str]]:
    """
    Parse the COLUMN_OVERRIDES JSON document.

    Malformed documents are rejected rather than silently ignored so a
    deployment never runs against a half-applied schema pin.
    """
    if not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"COLUMN_OVERRIDES is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise RuntimeError("COLUMN_OVERRIDES must be a JSON object keyed by table")

    overrides: dict[str, dict[str, str]] = {}
    for table_key, columns in parsed.items():
        if not isinstance(columns, dict):
            raise RuntimeError(f"COLUMN_OVERRIDES['{table_key}'] must be an object")
        overrides[str(table_key)] = {
            str(semantic): str(column) for semantic, column in columns.items() if column
        }
    return overrides


def load_config(app_name: str = "cafe-console") -> AppConfig:
    """
    Produce an AppConfig instance populated from environment variables.

    Missing Supabase credentials are not an error here: the console starts,
    reports the configuration as absent and keeps its forms disabled.
    """
    auth_mode = _read_env("AUTH_MODE", "table").strip().lower()
    if auth_mode not in AUTH_MODES:
        raise RuntimeError(
            f"AUTH_MODE must be one of {', '.join(sorted(AUTH_MODES))}, got: {auth_mode}"
        )

    origins = _read_env("CORS_ALLOWED_ORIGINS", "")

    return AppConfig(
        app_name=app_name,
        supabase_url=sanitize_credential(os.getenv("SUPABASE_URL"), PLACEHOLDER_URLS),
        supabase_anon_key=sanitize_credential(os.getenv("SUPABASE_ANON_KEY"), PLACEHOLDER_KEYS),
        auth_mode=auth_mode,
        tables=TableNames(
            orders=_read_env("TABLE_ORDERS", "orders"),
            order_items=_read_env("TABLE_ORDER_ITEMS", "order_item"),
            items=_read_env("TABLE_ITEMS", "item"),
            menus=_read_env("TABLE_MENUS", "menu"),
            admin=_read_env("TABLE_ADMIN", "admin"),
            stores=_read_env("TABLE_STORES", "stores"),
            activity=_read_env("TABLE_ACTIVITY", "activity_logs"),
        ),
        column_overrides=parse_column_overrides(_read_env("COLUMN_OVERRIDES", "")),
        orders_limit=_read_int("ORDERS_LIMIT", 100),
        activity_limit=_read_int("ACTIVITY_LIMIT", 10),
        datetime_format=_read_env("DATETIME_FORMAT", "%b %d, %Y %H:%M"),
        postgrest_timeout=_read_int("POSTGREST_TIMEOUT", 10),
        secret_key=_read_env("SECRET_KEY", "super-secret-change-me"),
        log_level=_read_env("LOG_LEVEL", "INFO"),
        debug_mode=read_bool("DEBUG_MODE", "false"),
        cors_allowed_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
        redis_url=_read_env("REDIS_URL", ""),
        session_ttl_seconds=_read_int("SESSION_TTL_SECONDS", 14400),
    )
