"""
Admin profile: the latest admin record plus store assignments and recent activity.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from http import HTTPStatus
from typing import Any

from cafe_console.context import ConsoleContext
from cafe_console.services.table_utils import prime_mapping
from cafe_shared.constants import NoticeVariant
from cafe_shared.errors import BackendError, Notice, SessionError
from cafe_shared.formatting import first_identifier
from cafe_shared.reconciler import ADMIN_SCHEMA
from cafe_shared.serializers import serialize_profile, success_response
from cafe_shared.supabase.client import DataClient
from cafe_shared.view_models import ActivityEntry, map_activity, map_admin_profile, map_store_names

logger = logging.getLogger(__name__)


def _fetch_admin(
    console: ConsoleContext, client: DataClient, admin_id: Any
) -> tuple[dict[str, Any] | None, Any]:
    admins = console.mapping("admin")
    prime_mapping(client, admins)
    result = (
        client.from_(admins.table)
        .select("*")
        .eq(admins["id"], admin_id)
        .maybe_single()
        .execute()
        .raise_for_error()
    )
    row = result.rows[0] if result.rows else None
    return row, admins.learn([row] if row else [])


def _fetch_stores(console: ConsoleContext, client: DataClient, cafe_id: Any) -> list[str]:
    if cafe_id is None:
        return []
    stores = console.mapping("stores")
    prime_mapping(client, stores)
    result = client.from_(stores.table).select("*").eq(stores["cafeId"], cafe_id).execute()
    if result.error:
        logger.warning(f"Unable to load store assignments: {result.error}")
        return []
    return map_store_names(result.rows, stores.learn(result.rows))


def _fetch_activity(
    console: ConsoleContext, client: DataClient, admin_id: Any
) -> list[ActivityEntry]:
    activity = console.mapping("activity")
    prime_mapping(client, activity)
    result = (
        client.from_(activity.table)
        .select("*")
        .eq(activity["adminId"], admin_id)
        .order(activity["createdAt"], desc=True)
        .limit(console.config.activity_limit)
        .execute()
    )
    if result.error:
        logger.warning(f"Unable to load recent activity: {result.error}")
        return []
    return map_activity(result.rows, activity.learn(result.rows), console.config.datetime_format)


def get_profile(console: ConsoleContext, session: dict[str, Any] | None) -> tuple[dict, HTTPStatus]:
    """
    Profile view for the signed-in admin.

    A failed admin lookup falls back to the cached session details with a
    warning notice. Stores and activity are loaded side by side; either one
    failing leaves its list empty.
    """
    cached = (session or {}).get("admin") or {}
    admin_id = first_identifier(cached.get("admin_id"), cached.get("id"))
    if admin_id is None:
        raise SessionError()

    client = console.require_client()
    fallback_columns = ADMIN_SCHEMA.initial_map(console.config.tables.admin)

    notice = Notice(
        message="Profile details loaded from the admin table.",
        variant=NoticeVariant.SUCCESS.value,
    )
    try:
        record, columns = _fetch_admin(console, client, admin_id)
    except BackendError as exc:
        logger.warning(f"Unable to refresh admin {admin_id}, using cached details: {exc}")
        record, columns = None, fallback_columns
        notice = Notice(
            message="Showing cached admin details. Unable to refresh from Supabase.",
            variant=NoticeVariant.WARNING.value,
        )
    if record is None:
        # Cached session keys are already the canonical column names.
        record, columns = cached, fallback_columns

    cafe_id = columns.value(record, "cafeId")
    with ThreadPoolExecutor(max_workers=2) as executor:
        stores_future = executor.submit(_fetch_stores, console, client, cafe_id)
        activity_future = executor.submit(_fetch_activity, console, client, admin_id)
        stores = stores_future.result()
        activity = activity_future.result()

    profile = map_admin_profile(record, columns, stores, activity, console.config.datetime_format)
    if profile.id is None:
        profile.id = admin_id
    return success_response(serialize_profile(profile), notice=notice), HTTPStatus.OK
