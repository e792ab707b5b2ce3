import pytest

from cafe_shared.config import (
    PLACEHOLDER_URLS,
    load_config,
    parse_column_overrides,
    sanitize_credential,
)

ENV_VARS = (
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "AUTH_MODE",
    "COLUMN_OVERRIDES",
    "TABLE_ITEMS",
    "ORDERS_LIMIT",
    "CORS_ALLOWED_ORIGINS",
    "DEBUG_MODE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_credentials():
    config = load_config()
    assert config.supabase_configured is False
    assert config.auth_mode == "table"
    assert config.tables.items == "item"
    assert config.orders_limit == 100
    assert config.column_overrides == {}


def test_environment_values(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", " https://abc.supabase.co ")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("AUTH_MODE", "Supabase")
    monkeypatch.setenv("TABLE_ITEMS", "menu_items")
    monkeypatch.setenv("ORDERS_LIMIT", "not-a-number")
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://a.example, ,https://b.example")
    monkeypatch.setenv("DEBUG_MODE", "yes")

    config = load_config()

    assert config.supabase_url == "https://abc.supabase.co"
    assert config.supabase_configured is True
    assert config.auth_mode == "supabase"
    assert config.tables.items == "menu_items"
    assert config.orders_limit == 100
    assert config.cors_allowed_origins == ["https://a.example", "https://b.example"]
    assert config.debug_mode is True


@pytest.mark.parametrize(
    "value",
    [None, "", "   ", "YOUR_SUPABASE_URL", "https://your-project-id.supabase.co"],
)
def test_placeholder_urls_count_as_missing(value):
    assert sanitize_credential(value, PLACEHOLDER_URLS) == ""


def test_placeholder_key_disables_console(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "YOUR_SUPABASE_ANON_KEY")
    assert load_config().supabase_configured is False


def test_invalid_auth_mode(monkeypatch):
    monkeypatch.setenv("AUTH_MODE", "ldap")
    with pytest.raises(RuntimeError, match="AUTH_MODE"):
        load_config()


def test_column_overrides(monkeypatch):
    monkeypatch.setenv(
        "COLUMN_OVERRIDES", '{"menu_items": {"price": "unit_price", "status": ""}}'
    )
    config = load_config()
    assert config.overrides_for("menu_items") == {"price": "unit_price"}
    assert config.overrides_for("orders") == {}


@pytest.mark.parametrize("raw", ["{not json", "[]", '{"orders": "id"}'])
def test_malformed_column_overrides(raw):
    with pytest.raises(RuntimeError, match="COLUMN_OVERRIDES"):
        parse_column_overrides(raw)
