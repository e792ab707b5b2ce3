import json
from dataclasses import replace

import pytest

from cafe_console.app import create_app
from cafe_shared.constants import SESSION_STORAGE_KEY


@pytest.fixture
def menu_data(fake_db):
    fake_db.seed(
        "menu",
        [{"menu_id": 1, "cafe_id": 7, "name": "Breakfast", "description": None, "is_active": True}],
        id_column="menu_id",
    )
    fake_db.seed(
        "item",
        [
            {
                "item_id": 10,
                "menu_id": 1,
                "item_name": "Latte",
                "description": None,
                "price": 4.5,
                "is_available": True,
            }
        ],
        id_column="item_id",
    )
    return fake_db


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["supabase_configured"] is True
    assert response.get_json()["auth_mode"] == "table"


class TestDashboardGuard:
    def test_browser_is_redirected_to_login(self, client):
        response = client.get("/orders")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/auth/login")

    def test_api_client_gets_401_with_redirect(self, client):
        response = client.get("/orders", headers={"Accept": "application/json"})
        body = response.get_json()

        assert response.status_code == 401
        assert body["details"]["redirect"] == "/auth/login"
        assert body["notice"]["variant"] == "warning"

    def test_tampered_session_is_cleared(self, client):
        with client.session_transaction() as session:
            session[SESSION_STORAGE_KEY] = json.dumps({"admin": {"id": ""}})
        response = client.get("/profile")
        assert response.status_code == 302
        with client.session_transaction() as session:
            assert SESSION_STORAGE_KEY not in session


class TestAuthRoutes:
    def test_login_page_reports_forms_enabled(self, client):
        body = client.get("/auth/login").get_json()
        assert body["data"]["forms_enabled"] is True
        assert "notice" not in body

    def test_bad_credentials(self, client, fake_db, admin_row):
        fake_db.seed("admin", [admin_row])
        response = client.post(
            "/auth/login", json={"email": "ada@example.com", "password": "wrong-pass"}
        )
        assert response.status_code == 401
        assert response.get_json()["notice"]["message"] == (
            "Incorrect email or password. Please try again."
        )

    def test_form_post_login(self, client, fake_db, admin_row):
        fake_db.seed("admin", [admin_row])
        response = client.post(
            "/auth/login", data={"email": "ada@example.com", "password": "secret-pass"}
        )
        assert response.status_code == 200
        assert client.get("/auth/session").get_json()["data"]["signed_in_as"] == "Ada Lovelace"

    def test_logout_ends_session(self, signed_in_client):
        response = signed_in_client.post("/auth/logout")
        assert response.get_json()["data"]["redirect"] == "/auth/login"
        assert signed_in_client.get("/orders").status_code == 302


class TestSignedIn:
    def test_dashboard_sections(self, signed_in_client):
        body = signed_in_client.get("/").get_json()
        assert [section["title"] for section in body["data"]["sections"]] == [
            "Orders",
            "Menu management",
            "Profile",
        ]
        assert body["data"]["signed_in_as"] == "Ada Lovelace"

    def test_orders_and_status_update(self, signed_in_client, fake_db):
        fake_db.seed("orders", [{"order_id": 5, "status": "pending", "total": 3}])

        listing = signed_in_client.get("/orders?status=pending").get_json()
        assert [order["order_id"] for order in listing["data"]["orders"]] == [5]

        response = signed_in_client.patch("/orders/5/status", json={"status": "completed"})
        assert response.status_code == 200
        assert response.get_json()["data"]["status"] == "completed"

    def test_missing_status_is_a_validation_error(self, signed_in_client, fake_db):
        fake_db.seed("orders", [{"order_id": 5, "status": "pending"}])
        response = signed_in_client.patch("/orders/5/status", json={})
        assert response.status_code == 400
        assert response.get_json()["notice"]["variant"] == "warning"

    def test_unknown_order_is_404(self, signed_in_client, fake_db):
        fake_db.seed("orders", [{"order_id": 5, "status": "pending"}])
        response = signed_in_client.patch("/orders/6/status", json={"status": "completed"})
        assert response.status_code == 404

    def test_backend_failure_is_502(self, signed_in_client, fake_db):
        fake_db.fail("orders")
        response = signed_in_client.get("/orders")
        assert response.status_code == 502
        assert response.get_json()["details"] == {"code": "42P01"}

    def test_menu_endpoints(self, signed_in_client, menu_data):
        assert signed_in_client.get("/menus").get_json()["data"]["menus"][0]["name"] == "Breakfast"

        created = signed_in_client.post(
            "/menus/1/items", json={"name": "Scone", "price": "2.25", "status": "available"}
        )
        assert created.status_code == 201
        names = [item["name"] for item in created.get_json()["data"]["items"]]
        assert names == ["Latte", "Scone"]

        updated = signed_in_client.put("/menu-items/10", json={"status": "out_of_stock"})
        latte = updated.get_json()["data"]["items"][0]
        assert latte["status"] == "out_of_stock"
        assert menu_data.tables["item"][0]["is_available"] is False

        deleted = signed_in_client.delete("/menu-items/10")
        assert [item["name"] for item in deleted.get_json()["data"]["items"]] == ["Scone"]

    def test_menu_create_uses_session_cafe(self, signed_in_client, menu_data):
        response = signed_in_client.post("/menus", json={"name": "Lunch"})
        assert response.status_code == 201
        assert menu_data.tables["menu"][-1]["cafe_id"] == 7

    def test_profile(self, signed_in_client):
        body = signed_in_client.get("/profile").get_json()
        assert body["data"]["email"] == "ada@example.com"
        assert body["data"]["first_name"] == "Ada"


def test_unconfigured_console_disables_forms(config, admin_row):
    app = create_app(replace(config, supabase_url="", supabase_anon_key=""))
    app.config["TESTING"] = True
    client = app.test_client()

    login_page = client.get("/auth/login").get_json()
    assert login_page["data"]["forms_enabled"] is False
    assert login_page["notice"]["sticky"] is True

    with client.session_transaction() as session:
        session[SESSION_STORAGE_KEY] = json.dumps({"admin": {"id": 1, "admin_id": 1}})
    response = client.get("/orders")
    assert response.status_code == 503
    assert response.get_json()["details"] == {"forms_enabled": False}
