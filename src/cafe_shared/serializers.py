"""
Serializers for consistent API responses.
"""

from __future__ import annotations

from typing import Any

from cafe_shared.errors import Notice
from cafe_shared.formatting import DEFAULT_DATETIME_FORMAT, format_currency, format_datetime
from cafe_shared.status import format_status
from cafe_shared.view_models import AdminProfile, Menu, MenuItem, Order


def serialize_order(order: Order) -> dict[str, Any]:
    """Serialize Order view-model."""
    return {
        "order_id": order.id,
        "customer": order.customer,
        "customer_id": order.customer_id,
        "status": order.status,
        "status_display": format_status(order.status),
        "total": order.total,
        "total_display": format_currency(order.total),
        "placed_at": order.placed_at,
        "notes": order.notes,
        "cafe_id": order.cafe_id,
        "items": [{"name": item.name, "qty": item.qty} for item in order.items],
    }


def serialize_menu_item(item: MenuItem) -> dict[str, Any]:
    """Serialize MenuItem view-model."""
    return {
        "item_id": item.id,
        "menu_id": item.menu_id,
        "name": item.name,
        "description": item.description,
        "price": item.price,
        "price_display": format_currency(item.price),
        "status": item.status,
        "status_display": format_status(item.status),
    }


def serialize_menu(menu: Menu, datetime_format: str = DEFAULT_DATETIME_FORMAT) -> dict[str, Any]:
    """Serialize Menu view-model."""
    return {
        "menu_id": menu.id,
        "cafe_id": menu.cafe_id,
        "name": menu.name,
        "description": menu.description,
        "is_active": menu.is_active,
        "status_display": "Active" if menu.is_active else "Inactive",
        "updated_at": format_datetime(menu.updated_at, datetime_format),
    }


def serialize_profile(profile: AdminProfile) -> dict[str, Any]:
    return {
        "id": profile.id,
        "display_name": profile.display_name,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "email": profile.email,
        "role": profile.role,
        "cafe_id": profile.cafe_id,
        "created_at": profile.created_at,
        "stores": list(profile.stores),
        "recent_activity": [
            {"description": entry.description, "timestamp": entry.timestamp}
            for entry in profile.recent_activity
        ],
    }


def success_response(
    data: Any, message: str | None = None, notice: Notice | None = None
) -> dict[str, Any]:
    """Create a standardized success response."""
    response = {"status": "success", "data": data, "error": None}
    if message:
        response["message"] = message
    if notice:
        response["notice"] = notice.to_dict()
    return response


def error_response(
    error: str, details: dict[str, Any] | None = None, notice: Notice | None = None
) -> dict[str, Any]:
    """Create a standardized error response."""
    response = {"status": "error", "data": None, "error": error}
    if details:
        response["details"] = details
    if notice:
        response["notice"] = notice.to_dict()
    return response
