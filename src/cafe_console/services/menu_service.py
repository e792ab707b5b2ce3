"""
Menu management helpers for the admin console.

Every mutation is followed by a full re-fetch of the affected list, and the
column map learned from the first read of the request is reused to build
the write payload.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from cafe_console.context import ConsoleContext
from cafe_console.services.table_utils import prime_mapping
from cafe_shared.constants import MenuActiveStatus, NoticeVariant
from cafe_shared.errors import IdentifierError, Notice, ValidationError
from cafe_shared.reconciler import TableMapping
from cafe_shared.schemas import MenuItemRequest, MenuRequest
from cafe_shared.serializers import serialize_menu, serialize_menu_item, success_response
from cafe_shared.supabase.client import DataClient
from cafe_shared.view_models import (
    Menu,
    MenuItem,
    build_menu_item_payload,
    build_menu_payload,
    extract_identifier,
    map_menu_item_row,
    map_menu_row,
    parse_identifier,
)

logger = logging.getLogger(__name__)


def _success(message: str) -> Notice:
    return Notice(message=message, variant=NoticeVariant.SUCCESS.value)


def _fetch_menus(client: DataClient, menus: TableMapping) -> list[Menu]:
    result = (
        client.from_(menus.table)
        .select("*")
        .order(menus["name"])
        .execute()
        .raise_for_error()
    )
    columns = menus.learn(result.rows)
    return [map_menu_row(row, columns) for row in result.rows]


def _fetch_items(
    client: DataClient, items: TableMapping, menu_id: Any
) -> list[MenuItem]:
    result = (
        client.from_(items.table)
        .select("*")
        .eq(items["menuId"], menu_id)
        .order(items["name"])
        .execute()
        .raise_for_error()
    )
    columns = items.learn(result.rows)
    return [map_menu_item_row(row, columns) for row in result.rows]


def _load_one(client: DataClient, mapping: TableMapping, record_id: Any) -> dict[str, Any]:
    identifier = parse_identifier(record_id)
    if identifier is None:
        raise IdentifierError()
    result = (
        client.from_(mapping.table)
        .select("*")
        .eq(mapping["id"], identifier)
        .maybe_single()
        .execute()
        .raise_for_error()
    )
    if not result.rows:
        raise IdentifierError(f"No record with id {identifier} in '{mapping.table}'.")
    row = result.rows[0]
    mapping.learn([row])
    return row


def _menus_payload(console: ConsoleContext, menus: list[Menu]) -> dict[str, Any]:
    fmt = console.config.datetime_format
    return {
        "menus": [serialize_menu(menu, fmt) for menu in menus],
        "empty_message": None if menus else "Create a menu before adding menu items.",
    }


def _items_payload(menu_id: Any, items: list[MenuItem]) -> dict[str, Any]:
    return {
        "menu_id": menu_id,
        "items": [serialize_menu_item(item) for item in items],
        "empty_message": None if items else "No menu items yet.",
    }


# ==================== MENUS ====================


def list_menus(console: ConsoleContext) -> tuple[dict, HTTPStatus]:
    client = console.require_client()
    menus = console.mapping("menus")
    prime_mapping(client, menus)
    return success_response(_menus_payload(console, _fetch_menus(client, menus))), HTTPStatus.OK


def _menu_request(
    payload: dict[str, Any], session: dict[str, Any] | None, existing: Menu | None = None
) -> MenuRequest:
    values = dict(payload)
    if existing is not None:
        values.setdefault("name", existing.name)
        values.setdefault("cafe_id", existing.cafe_id)
        values.setdefault("description", existing.description)
        values.setdefault(
            "status",
            (MenuActiveStatus.ACTIVE if existing.is_active else MenuActiveStatus.INACTIVE).value,
        )
    if values.get("cafe_id") in (None, "") and session:
        values["cafe_id"] = (session.get("admin") or {}).get("cafe_id")

    request_data = MenuRequest.model_validate(values)
    if not request_data.name or request_data.cafe_id is None:
        raise ValidationError("Both menu name and cafe ID are required.")
    return request_data


def create_menu(
    console: ConsoleContext, payload: dict[str, Any], session: dict[str, Any] | None = None
) -> tuple[dict, HTTPStatus]:
    request_data = _menu_request(payload, session)
    client = console.require_client()
    menus = console.mapping("menus")
    columns = prime_mapping(client, menus)

    (
        client.from_(menus.table)
        .insert([build_menu_payload(request_data.model_dump(), columns)])
        .execute()
        .raise_for_error("MENU_001")
    )
    logger.info(f"Menu '{request_data.name}' created for cafe {request_data.cafe_id}")

    refreshed = _fetch_menus(client, menus)
    return (
        success_response(
            _menus_payload(console, refreshed), notice=_success("Menu created successfully.")
        ),
        HTTPStatus.CREATED,
    )


def update_menu(
    console: ConsoleContext,
    menu_id: Any,
    payload: dict[str, Any],
    session: dict[str, Any] | None = None,
) -> tuple[dict, HTTPStatus]:
    client = console.require_client()
    menus = console.mapping("menus")
    prime_mapping(client, menus)
    current = map_menu_row(_load_one(client, menus, menu_id), menus.columns)
    identifier = extract_identifier(current, menus.columns)
    if identifier is None:
        raise IdentifierError("Unable to determine the menu identifier for update.")

    request_data = _menu_request(payload, session, existing=current)
    (
        client.from_(menus.table)
        .update(build_menu_payload(request_data.model_dump(), menus.columns))
        .eq(menus["id"], identifier)
        .execute()
        .raise_for_error("MENU_001")
    )
    logger.info(f"Menu {identifier} updated")

    refreshed = _fetch_menus(client, menus)
    return (
        success_response(
            _menus_payload(console, refreshed), notice=_success("Menu updated successfully.")
        ),
        HTTPStatus.OK,
    )


def delete_menu(console: ConsoleContext, menu_id: Any) -> tuple[dict, HTTPStatus]:
    client = console.require_client()
    menus = console.mapping("menus")
    prime_mapping(client, menus)
    current = map_menu_row(_load_one(client, menus, menu_id), menus.columns)
    identifier = extract_identifier(current, menus.columns)
    if identifier is None:
        raise IdentifierError("Unable to determine the menu identifier for deletion.")

    (
        client.from_(menus.table)
        .delete()
        .eq(menus["id"], identifier)
        .execute()
        .raise_for_error("MENU_005")
    )
    logger.info(f"Menu {identifier} deleted")

    refreshed = _fetch_menus(client, menus)
    notice = _success("Menu deleted.")
    return success_response(_menus_payload(console, refreshed), notice=notice), HTTPStatus.OK


# ==================== MENU ITEMS ====================


def list_items(console: ConsoleContext, menu_id: Any) -> tuple[dict, HTTPStatus]:
    identifier = parse_identifier(menu_id)
    if identifier is None:
        raise IdentifierError()
    client = console.require_client()
    items = console.mapping("menu_items")
    prime_mapping(client, items)
    listed = _fetch_items(client, items, identifier)
    return success_response(_items_payload(identifier, listed)), HTTPStatus.OK


def create_item(
    console: ConsoleContext, menu_id: Any, payload: dict[str, Any]
) -> tuple[dict, HTTPStatus]:
    values = dict(payload)
    if values.get("menu_id") in (None, ""):
        values["menu_id"] = menu_id
    request_data = MenuItemRequest.model_validate(values)

    client = console.require_client()
    items = console.mapping("menu_items")
    columns = prime_mapping(client, items)

    (
        client.from_(items.table)
        .insert([build_menu_item_payload(request_data.model_dump(), columns)])
        .execute()
        .raise_for_error("MENU_002")
    )
    logger.info(f"Menu item '{request_data.name}' created in menu {request_data.menu_id}")

    refreshed = _fetch_items(client, items, request_data.menu_id)
    return (
        success_response(
            _items_payload(request_data.menu_id, refreshed),
            notice=_success("Menu item created successfully."),
        ),
        HTTPStatus.CREATED,
    )


def update_item(
    console: ConsoleContext, item_id: Any, payload: dict[str, Any]
) -> tuple[dict, HTTPStatus]:
    client = console.require_client()
    items = console.mapping("menu_items")
    prime_mapping(client, items)
    current = map_menu_item_row(_load_one(client, items, item_id), items.columns)
    identifier = extract_identifier(current, items.columns)
    if identifier is None:
        raise IdentifierError("Unable to determine the menu item identifier for update.")

    values = {
        "name": current.name,
        "menu_id": current.menu_id,
        "description": current.description,
        "price": current.price,
        "status": current.status,
        **payload,
    }
    request_data = MenuItemRequest.model_validate(values)
    (
        client.from_(items.table)
        .update(build_menu_item_payload(request_data.model_dump(), items.columns))
        .eq(items["id"], identifier)
        .execute()
        .raise_for_error("MENU_002")
    )
    logger.info(f"Menu item {identifier} updated")

    refreshed = _fetch_items(client, items, request_data.menu_id)
    return (
        success_response(
            _items_payload(request_data.menu_id, refreshed),
            notice=_success("Menu item updated successfully."),
        ),
        HTTPStatus.OK,
    )


def delete_item(console: ConsoleContext, item_id: Any) -> tuple[dict, HTTPStatus]:
    client = console.require_client()
    items = console.mapping("menu_items")
    prime_mapping(client, items)
    current = map_menu_item_row(_load_one(client, items, item_id), items.columns)
    identifier = extract_identifier(current, items.columns)
    if identifier is None:
        raise IdentifierError("Unable to determine the menu item identifier for deletion.")

    (
        client.from_(items.table)
        .delete()
        .eq(items["id"], identifier)
        .execute()
        .raise_for_error("MENU_004")
    )
    logger.info(f"Menu item {identifier} deleted")

    refreshed = _fetch_items(client, items, current.menu_id)
    return (
        success_response(
            _items_payload(current.menu_id, refreshed), notice=_success("Menu item deleted.")
        ),
        HTTPStatus.OK,
    )
