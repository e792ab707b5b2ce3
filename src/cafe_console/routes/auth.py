"""
Authentication routes for the admin console.
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from cafe_console.context import get_console
from cafe_console.services.auth_service import current_session, login, logout, signup
from cafe_shared.errors import ConfigurationError
from cafe_shared.serializers import success_response

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")
logger = logging.getLogger(__name__)


def _form_payload() -> dict:
    """JSON body, or the submitted form for browser posts."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


@auth_bp.get("/login")
def login_page():
    """Login form state: whether forms are enabled and any configuration notice."""
    console = get_console()
    response, status = current_session(console)
    if not console.configured:
        response = success_response(response["data"], notice=ConfigurationError().notice)
    return jsonify(response), status


@auth_bp.post("/login")
def post_login():
    response, status = login(get_console(), _form_payload())
    return jsonify(response), status


@auth_bp.post("/signup")
def post_signup():
    response, status = signup(get_console(), _form_payload())
    return jsonify(response), status


@auth_bp.post("/logout")
def post_logout():
    response, status = logout(get_console())
    return jsonify(response), status


@auth_bp.get("/session")
def get_session():
    response, status = current_session(get_console())
    return jsonify(response), status
