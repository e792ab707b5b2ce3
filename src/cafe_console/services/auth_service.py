"""
Admin sign-in, sign-up and sign-out.

Two mutually exclusive modes exist per deployment (``AUTH_MODE``):

- ``table``: credentials are checked against the admin table directly. New
  accounts store a werkzeug password hash; older rows holding clear text
  still sign in.
- ``supabase``: Supabase auth issues the session; the admin details come
  from the user metadata and the tokens are cached with the session.

Either way the outcome is a cached admin session in the session store.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from cafe_console.context import ConsoleContext
from cafe_console.services.table_utils import prime_mapping
from cafe_shared.constants import AuthMode, NoticeVariant
from cafe_shared.errors import AuthenticationError, BackendError, Notice
from cafe_shared.reconciler import ColumnMap
from cafe_shared.schemas import LoginRequest, SignupRequest
from cafe_shared.security import hash_password, verify_password
from cafe_shared.serializers import success_response
from cafe_shared.view_models import admin_display_name

logger = logging.getLogger(__name__)

DASHBOARD_URL = "/"


def _admin_record(row: dict[str, Any], columns: ColumnMap) -> dict[str, Any]:
    """Admin row -> session source record; the password column is dropped."""
    admin_id = columns.value(row, "id")
    if admin_id is None:
        admin_id = row.get("admin_id")
    return {
        "id": admin_id,
        "admin_id": admin_id,
        "cafe_id": columns.value(row, "cafeId"),
        "name": columns.value(row, "name"),
        "email": columns.value(row, "email"),
        "created_at": columns.value(row, "createdAt"),
    }


def _user_record(user: Any, session: Any) -> dict[str, Any]:
    metadata = getattr(user, "user_metadata", None) or {}
    record = {
        "id": getattr(user, "id", None),
        "cafe_id": metadata.get("cafe_id"),
        "name": metadata.get("name"),
        "email": getattr(user, "email", None),
        "created_at": getattr(user, "created_at", None),
        "user_id": getattr(user, "id", None),
    }
    if session is not None:
        record["access_token"] = getattr(session, "access_token", None)
        record["refresh_token"] = getattr(session, "refresh_token", None)
    return record


def _signed_in(console: ConsoleContext, record: dict[str, Any], message: str, status: HTTPStatus):
    console.session_store.cache(record)
    session = console.session_store.get()
    notice = Notice(message=message, variant=NoticeVariant.SUCCESS.value)
    return (
        success_response(
            {
                "session": session,
                "signed_in_as": admin_display_name((session or {}).get("admin")),
                "redirect": DASHBOARD_URL,
            },
            notice=notice,
        ),
        status,
    )


# ==================== LOGIN ====================


def _login_with_table(console: ConsoleContext, credentials: LoginRequest) -> dict[str, Any]:
    client = console.require_client()
    admins = console.mapping("admin")
    columns = prime_mapping(client, admins)

    result = (
        client.from_(admins.table)
        .select("*")
        .eq(columns["email"], credentials.email)
        .maybe_single()
        .execute()
    )
    if result.error:
        raise result.error.with_code("AUTH_004")

    row = result.rows[0] if result.rows else None
    if row is None:
        logger.warning(f"Login failed: no admin row for {credentials.email}")
        raise AuthenticationError()

    columns = admins.learn([row])
    if not verify_password(columns.value(row, "password"), credentials.password):
        logger.warning(f"Login failed: password mismatch for {credentials.email}")
        raise AuthenticationError()
    return _admin_record(row, columns)


def _login_with_supabase(console: ConsoleContext, credentials: LoginRequest) -> dict[str, Any]:
    client = console.require_client()
    result = client.auth.sign_in_with_password(credentials.email, credentials.password)
    if result.error:
        logger.warning(f"Supabase sign-in failed for {credentials.email}: {result.error}")
        raise AuthenticationError()
    response = result.data
    user = getattr(response, "user", None)
    if user is None:
        raise AuthenticationError()
    return _user_record(user, getattr(response, "session", None))


def login(console: ConsoleContext, payload: dict[str, Any]) -> tuple[dict, HTTPStatus]:
    """
    Verify credentials and cache the admin session.

    Raises:
        ValidationError: missing or malformed credentials
        AuthenticationError: unknown email or wrong password
        BackendError: the credential lookup failed (AUTH_004)
    """
    credentials = LoginRequest.model_validate(payload)
    logger.info(f"Login attempt for email: {credentials.email}")

    if console.auth_mode is AuthMode.SUPABASE:
        record = _login_with_supabase(console, credentials)
    else:
        record = _login_with_table(console, credentials)

    logger.info(f"Admin {record.get('id')} signed in")
    return _signed_in(console, record, "Logged in successfully.", HTTPStatus.OK)


# ==================== SIGNUP ====================


def _signup_with_table(console: ConsoleContext, request_data: SignupRequest) -> dict[str, Any]:
    client = console.require_client()
    admins = console.mapping("admin")
    columns = prime_mapping(client, admins)

    row = {
        columns["name"]: request_data.name,
        columns["cafeId"]: request_data.cafe_id,
        columns["email"]: request_data.email,
        columns["password"]: hash_password(request_data.password),
    }
    created = client.from_(admins.table).insert([row]).execute()
    if created.error:
        raise created.error.with_code("AUTH_003")

    record_row = created.rows[0] if created.rows else None
    if record_row is None:
        refreshed = (
            client.from_(admins.table)
            .select("*")
            .eq(columns["email"], request_data.email)
            .maybe_single()
            .execute()
            .raise_for_error("AUTH_003")
        )
        record_row = refreshed.rows[0] if refreshed.rows else None
    if record_row is None:
        raise BackendError(
            "Admin row not returned after insert", table=admins.table, code="AUTH_003"
        )

    return _admin_record(record_row, admins.learn([record_row]))


def _signup_with_supabase(console: ConsoleContext, request_data: SignupRequest) -> dict[str, Any]:
    client = console.require_client()
    result = client.auth.sign_up(
        request_data.email,
        request_data.password,
        {"name": request_data.name, "cafe_id": request_data.cafe_id},
    )
    if result.error:
        raise result.error.with_code("AUTH_003")
    response = result.data
    user = getattr(response, "user", None)
    if user is None:
        raise BackendError("Supabase returned no user for sign-up", table="auth", code="AUTH_003")
    return _user_record(user, getattr(response, "session", None))


def signup(console: ConsoleContext, payload: dict[str, Any]) -> tuple[dict, HTTPStatus]:
    request_data = SignupRequest.model_validate(payload)
    logger.info(f"Sign-up attempt for email: {request_data.email}")

    if console.auth_mode is AuthMode.SUPABASE:
        record = _signup_with_supabase(console, request_data)
    else:
        record = _signup_with_table(console, request_data)

    logger.info(f"Admin {record.get('id')} created for cafe {request_data.cafe_id}")
    return _signed_in(
        console, record, "Account created and signed in successfully.", HTTPStatus.CREATED
    )


# ==================== SESSION ====================


def logout(console: ConsoleContext) -> tuple[dict, HTTPStatus]:
    """Clear the cached session; a failing Supabase sign-out is only logged."""
    if console.auth_mode is AuthMode.SUPABASE and console.configured:
        result = console.require_client().auth.sign_out()
        if result.error:
            logger.warning(f"Supabase sign-out failed, clearing local session: {result.error}")
    console.session_store.clear()
    notice = Notice(message="Signed out successfully.", variant=NoticeVariant.INFO.value)
    return (
        success_response({"redirect": console.session_store.login_url}, notice=notice),
        HTTPStatus.OK,
    )


def current_session(console: ConsoleContext) -> tuple[dict, HTTPStatus]:
    session = console.session_store.get()
    admin = (session or {}).get("admin")
    return (
        success_response(
            {
                "configured": console.configured,
                "forms_enabled": console.configured,
                "auth_mode": console.auth_mode.value,
                "session": session,
                "signed_in_as": admin_display_name(admin) if admin else None,
            }
        ),
        HTTPStatus.OK,
    )
