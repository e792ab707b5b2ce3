"""
Health check endpoint.
"""

from flask import Blueprint, jsonify

from cafe_console.context import get_console

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    """Liveness plus whether Supabase credentials are present."""
    console = get_console()
    return jsonify(
        {
            "status": "ok",
            "app": console.config.app_name,
            "supabase_configured": console.configured,
            "auth_mode": console.auth_mode.value,
        }
    )
