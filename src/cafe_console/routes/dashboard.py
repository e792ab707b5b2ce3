"""
Dashboard landing: section navigation and the signed-in admin.
"""

from flask import Blueprint, jsonify

from cafe_console.context import get_console
from cafe_console.decorators import current_admin_session, dashboard_required
from cafe_shared.errors import ConfigurationError
from cafe_shared.serializers import success_response
from cafe_shared.view_models import admin_display_name

dashboard_bp = Blueprint("dashboard", __name__)

SECTIONS = [
    {
        "key": "orders",
        "title": "Orders",
        "subtitle": "Monitor live orders and their line items.",
        "url": "/orders",
    },
    {
        "key": "menu",
        "title": "Menu management",
        "subtitle": "Maintain the menu catalog and keep pricing in sync.",
        "url": "/menus",
    },
    {
        "key": "profile",
        "title": "Profile",
        "subtitle": "Review your admin identity and store assignments.",
        "url": "/profile",
    },
]


@dashboard_bp.get("/")
@dashboard_required
def index():
    console = get_console()
    session = current_admin_session() or {}
    notice = None if console.configured else ConfigurationError().notice
    return jsonify(
        success_response(
            {
                "sections": SECTIONS,
                "signed_in_as": admin_display_name(session.get("admin")),
                "supabase_configured": console.configured,
            },
            notice=notice,
        )
    )
