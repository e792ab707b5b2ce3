"""
Render-ready view-models built from raw Supabase rows.

Every mapper reads fields through a :class:`~cafe_shared.reconciler.ColumnMap`
so it works against whichever schema variant the deployment runs, and keeps
the raw row so identifiers can be recovered for updates and deletes.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from cafe_shared.constants import (
    DEFAULT_ADMIN_NAME,
    DEFAULT_MENU_ITEM_NAME,
    DEFAULT_MENU_NAME,
    EMPTY_PLACEHOLDER,
    GUEST_CUSTOMER,
    MenuActiveStatus,
    MenuStatus,
)
from cafe_shared.formatting import (
    DEFAULT_DATETIME_FORMAT,
    first_identifier,
    format_datetime,
    to_number,
    to_quantity,
)
from cafe_shared.reconciler import ColumnMap, is_boolean_column, is_cents_column
from cafe_shared.status import normalize_menu_status, normalize_order_status

_INTEGER = re.compile(r"^-?\d+$")


@dataclass
class OrderLineItem:
    name: str
    qty: int = 1


@dataclass
class Order:
    id: Any
    customer: str
    status: str
    total: float
    placed_at: str
    created_at: Any = None
    customer_id: Any = None
    notes: str = ""
    cafe_id: Any = None
    items: list[OrderLineItem] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class MenuItem:
    id: Any
    menu_id: Any
    name: str
    description: str
    price: float
    status: str
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class Menu:
    id: Any
    cafe_id: Any
    name: str
    description: str
    is_active: bool
    updated_at: Any = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class ActivityEntry:
    description: str
    timestamp: str | None = None


@dataclass
class AdminProfile:
    id: Any
    display_name: str
    first_name: str
    last_name: str
    email: str
    role: str
    cafe_id: Any
    created_at: str
    stores: list[str] = field(default_factory=list)
    recent_activity: list[ActivityEntry] = field(default_factory=list)


def parse_identifier(value: Any) -> Any:
    """Form input -> identifier: integers become ints, blanks become None."""
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return None
    if _INTEGER.match(text):
        return int(text)
    return text


def _to_bool(value: Any, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on", MenuActiveStatus.ACTIVE.value}
    return bool(value)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _amount(value: Any, column: str | None) -> float:
    amount = to_number(value, 0.0)
    if column and is_cents_column(column):
        amount = amount / 100
    return max(amount, 0.0)


def _nested_name(value: Any, *keys: str) -> str:
    if not isinstance(value, Mapping):
        return ""
    for key in keys:
        text = _text(value.get(key))
        if text:
            return text
    return ""


def resolve_customer(row: Mapping[str, Any], columns: ColumnMap) -> str:
    """Customer display name, walking the known schema variants."""
    mapped = columns.value(row, "customer")
    if isinstance(mapped, Mapping):
        mapped = _nested_name(mapped, "name", "full_name", "username")
    for candidate in (
        mapped,
        row.get("customer_full_name"),
        _nested_name(row.get("customer_details"), "name", "full_name"),
        _nested_name(row.get("user"), "username", "name"),
        row.get("user_name"),
    ):
        text = _text(candidate) if not isinstance(candidate, Mapping) else ""
        if text:
            return text
    return GUEST_CUSTOMER


def group_line_items(
    rows: Iterable[Any] | None,
    columns: ColumnMap,
    item_names: Mapping[Any, str] | None = None,
) -> dict[Any, list[OrderLineItem]]:
    """
    Group order-line rows by order identifier, preserving row order.

    Missing or empty input yields an empty mapping.
    """
    names = item_names or {}
    grouped: dict[Any, list[OrderLineItem]] = {}
    for row in rows or ():
        if not isinstance(row, Mapping):
            continue
        order_id = columns.value(row, "orderId")
        if order_id is None:
            continue
        item_id = columns.value(row, "itemId")
        label = names.get(item_id) or _text(columns.value(row, "name"))
        if not label:
            label = f"Item #{item_id if item_id is not None else EMPTY_PLACEHOLDER}"
        quantity = to_quantity(columns.value(row, "quantity", 1))
        grouped.setdefault(order_id, []).append(OrderLineItem(name=label, qty=quantity))
    return grouped


def map_item_names(rows: Iterable[Any] | None, columns: ColumnMap) -> dict[Any, str]:
    names: dict[Any, str] = {}
    for row in rows or ():
        item_id = columns.value(row, "id")
        if item_id is None:
            continue
        names[item_id] = _text(columns.value(row, "name")) or f"Item #{item_id}"
    return names


def map_order_row(
    row: Mapping[str, Any],
    columns: ColumnMap,
    items_by_order: Mapping[Any, list[OrderLineItem]] | None = None,
    datetime_format: str = DEFAULT_DATETIME_FORMAT,
) -> Order:
    row = row if isinstance(row, Mapping) else {}
    order_id = columns.value(row, "id")
    created_at = columns.value(row, "createdAt")
    items = list((items_by_order or {}).get(order_id, []))
    return Order(
        id=order_id if order_id is not None else EMPTY_PLACEHOLDER,
        customer=resolve_customer(row, columns),
        customer_id=columns.value(row, "customerId"),
        status=normalize_order_status(row.get(columns["status"])),
        total=_amount(columns.value(row, "total", 0), columns.get("total")),
        placed_at=format_datetime(created_at, datetime_format),
        created_at=created_at,
        notes=_text(columns.value(row, "notes")),
        cafe_id=columns.value(row, "cafeId"),
        items=items,
        raw=dict(row),
    )


def map_menu_item_row(row: Mapping[str, Any], columns: ColumnMap) -> MenuItem:
    row = row if isinstance(row, Mapping) else {}
    item_id = columns.value(row, "id")
    return MenuItem(
        id=item_id if item_id is not None else EMPTY_PLACEHOLDER,
        menu_id=columns.value(row, "menuId"),
        name=_text(columns.value(row, "name")) or DEFAULT_MENU_ITEM_NAME,
        description=_text(columns.value(row, "description")),
        price=_amount(columns.value(row, "price", 0), columns.get("price")),
        status=normalize_menu_status(row.get(columns["status"])),
        raw=dict(row),
    )


def map_menu_row(row: Mapping[str, Any], columns: ColumnMap) -> Menu:
    row = row if isinstance(row, Mapping) else {}
    menu_id = columns.value(row, "id")
    return Menu(
        id=menu_id if menu_id is not None else EMPTY_PLACEHOLDER,
        cafe_id=columns.value(row, "cafeId"),
        name=_text(columns.value(row, "name")) or DEFAULT_MENU_NAME,
        description=_text(columns.value(row, "description")),
        is_active=_to_bool(columns.value(row, "active"), default=True),
        updated_at=columns.value(row, "updatedAt") or columns.value(row, "createdAt"),
        raw=dict(row),
    )


def map_store_names(rows: Iterable[Any] | None, columns: ColumnMap) -> list[str]:
    stores = []
    for row in rows or ():
        if not isinstance(row, Mapping):
            continue
        name = _text(columns.value(row, "name"))
        if not name:
            store_id = columns.value(row, "id")
            name = f"Store #{store_id}" if store_id is not None else ""
        if name:
            stores.append(name)
    return stores


def map_activity(
    rows: Iterable[Any] | None,
    columns: ColumnMap,
    datetime_format: str = DEFAULT_DATETIME_FORMAT,
) -> list[ActivityEntry]:
    entries = []
    for row in rows or ():
        description = _text(columns.value(row, "description"))
        if not description:
            continue
        occurred = columns.value(row, "createdAt")
        entries.append(
            ActivityEntry(
                description=description,
                timestamp=format_datetime(occurred, datetime_format) if occurred else None,
            )
        )
    return entries


def admin_display_name(admin: Mapping[str, Any] | None) -> str:
    """Name shown next to "Signed in as"."""
    if not isinstance(admin, Mapping):
        return DEFAULT_ADMIN_NAME
    identifier = first_identifier(admin.get("id"), admin.get("admin_id"))
    return (
        _text(admin.get("name"))
        or _text(admin.get("email"))
        or (f"Admin #{identifier}" if identifier is not None else DEFAULT_ADMIN_NAME)
    )


def map_admin_profile(
    record: Mapping[str, Any] | None,
    columns: ColumnMap,
    stores: list[str] | None = None,
    activity: list[ActivityEntry] | None = None,
    datetime_format: str = DEFAULT_DATETIME_FORMAT,
) -> AdminProfile:
    record = record if isinstance(record, Mapping) else {}
    name = _text(columns.value(record, "name"))
    first = _text(columns.value(record, "firstName"))
    last = _text(columns.value(record, "lastName"))
    if not (first or last) and name:
        first, _, last = name.partition(" ")
        last = last.strip()
    if not name:
        name = " ".join(part for part in (first, last) if part)

    admin_id = first_identifier(
        columns.value(record, "id"), record.get("admin_id"), record.get("id")
    )
    email = _text(columns.value(record, "email"))
    display = admin_display_name({"id": admin_id, "name": name, "email": email})
    return AdminProfile(
        id=admin_id,
        display_name=display,
        first_name=first,
        last_name=last,
        email=email or EMPTY_PLACEHOLDER,
        role=_text(columns.value(record, "role")) or DEFAULT_ADMIN_NAME,
        cafe_id=columns.value(record, "cafeId"),
        created_at=format_datetime(columns.value(record, "createdAt"), datetime_format),
        stores=list(stores or []),
        recent_activity=list(activity or []),
    )


def build_menu_item_payload(values: Mapping[str, Any], columns: ColumnMap) -> dict[str, Any]:
    """
    Raw insert/update payload for a menu item, keyed by the mapped columns.

    Boolean availability columns receive a boolean, text status columns the
    normalized status, and cents price columns an integer amount in cents.
    """
    status = normalize_menu_status(values.get("status") or MenuStatus.AVAILABLE.value)
    status_column = columns["status"]
    status_value: Any = status
    if is_boolean_column(status_column):
        status_value = status == MenuStatus.AVAILABLE.value

    price_column = columns["price"]
    price = to_number(values.get("price"), 0.0)
    price_value: Any = int(round(price * 100)) if is_cents_column(price_column) else price

    description = _text(values.get("description"))
    return {
        columns["menuId"]: values.get("menu_id"),
        columns["name"]: _text(values.get("name")),
        columns["description"]: description or None,
        price_column: price_value,
        status_column: status_value,
    }


def build_menu_payload(values: Mapping[str, Any], columns: ColumnMap) -> dict[str, Any]:
    is_active = values.get("status") != MenuActiveStatus.INACTIVE.value
    active_column = columns["active"]
    active_value: Any = is_active
    if not is_boolean_column(active_column):
        active_value = (MenuActiveStatus.ACTIVE if is_active else MenuActiveStatus.INACTIVE).value

    description = _text(values.get("description"))
    return {
        columns["name"]: _text(values.get("name")),
        columns["cafeId"]: values.get("cafe_id"),
        columns["description"]: description or None,
        active_column: active_value,
    }


def build_order_status_payload(status: Any, columns: ColumnMap) -> dict[str, str]:
    return {columns["status"]: normalize_order_status(status)}


def extract_identifier(view_model: Any, columns: ColumnMap) -> Any:
    """
    Identifier for update/delete, read from the retained raw row.

    Falls back to the view-model's own id when the raw row lacks the column.
    """
    identifier = columns.value(getattr(view_model, "raw", None), "id")
    if identifier is None:
        identifier = getattr(view_model, "id", None)
    if identifier in (None, "", EMPTY_PLACEHOLDER):
        return None
    return identifier
