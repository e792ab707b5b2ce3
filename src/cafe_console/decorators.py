"""Decorators for route protection using the cached admin session."""

from __future__ import annotations

from functools import wraps

from flask import g, jsonify, redirect, request

from cafe_console.context import get_console
from cafe_shared.errors import SessionError
from cafe_shared.serializers import error_response


def should_return_json() -> bool:
    """
    JSON for API clients, redirects for browser navigation.
    """
    return request.is_json or (
        request.accept_mimetypes.accept_json and not request.accept_mimetypes.accept_html
    )


def login_redirect(location: str):
    if should_return_json():
        error = SessionError()
        return jsonify(
            error_response(str(error), {"redirect": location}, notice=error.notice)
        ), error.http_status
    return redirect(location)


def dashboard_required(f):
    """Decorator to require a cached admin session (redirects to login otherwise)."""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        console = get_console()
        session = console.session_store.require()
        if session is None:
            return login_redirect(console.navigator.location or console.session_store.login_url)
        g.admin_session = session
        return f(*args, **kwargs)

    return decorated_function


def current_admin_session() -> dict | None:
    return getattr(g, "admin_session", None)
