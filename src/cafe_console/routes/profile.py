"""
Admin profile API.
"""

from flask import Blueprint, jsonify

from cafe_console.context import get_console
from cafe_console.decorators import current_admin_session, dashboard_required
from cafe_console.services.profile_service import get_profile

profile_bp = Blueprint("profile", __name__)


@profile_bp.get("/profile")
@dashboard_required
def profile():
    response, status = get_profile(get_console(), current_admin_session())
    return jsonify(response), status
