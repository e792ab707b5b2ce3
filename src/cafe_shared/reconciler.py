"""
Column-name reconciliation for Supabase tables whose schema varies by deployment.

Several generations of the café schema are live at once (``price`` vs
``price_cents`` vs ``unit_price``, a text ``status`` vs a boolean
``availability``...). Instead of hardcoding one of them, each table gets a
:class:`TableSchema` listing acceptable column names per semantic field, and a
:class:`ColumnMap` is locked in from the first non-empty batch of rows.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

BOOLEAN_STATUS_COLUMNS = {
    "availability",
    "available",
    "is_available",
    "in_stock",
    "is_active",
    "active",
    "enabled",
}


def detect_column(present_keys: Iterable[str], candidates: Iterable[str], fallback: str) -> str:
    """
    Return the first candidate present in ``present_keys``, else ``fallback``.

    Candidates are ordered most-preferred first.
    """
    keys = present_keys if isinstance(present_keys, (set, frozenset)) else set(present_keys)
    for candidate in candidates:
        if candidate in keys:
            return candidate
    return fallback


def is_boolean_column(column: str) -> bool:
    return column in BOOLEAN_STATUS_COLUMNS or column.startswith("is_")


def is_cents_column(column: str) -> bool:
    return "cents" in column


@dataclass(frozen=True)
class FieldSpec:
    candidates: tuple[str, ...]
    fallback: str


@dataclass(frozen=True)
class ColumnMap:
    """Semantic field -> actual column name for one table."""

    table: str
    columns: Mapping[str, str] = field(default_factory=dict)

    def __getitem__(self, key: str) -> str:
        return self.columns[key]

    def __contains__(self, key: object) -> bool:
        return key in self.columns

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.columns.get(key, default)

    def keys(self):
        return self.columns.keys()

    def value(self, row: Mapping[str, Any] | None, key: str, default: Any = None) -> Any:
        """Read a semantic field out of a raw row."""
        if not isinstance(row, Mapping):
            return default
        column = self.columns.get(key)
        if column is None:
            return default
        value = row.get(column)
        return default if value is None else value

    def to_dict(self) -> dict[str, str]:
        return dict(self.columns)


@dataclass(frozen=True)
class TableSchema:
    """Ordered candidate column names for each semantic field of a table."""

    key: str
    fields: Mapping[str, FieldSpec]
    pinned: frozenset[str] = frozenset()

    def initial_map(self, table: str) -> ColumnMap:
        return ColumnMap(
            table=table,
            columns={name: spec.fallback for name, spec in self.fields.items()},
        )

    def with_overrides(self, overrides: Mapping[str, str] | None) -> TableSchema:
        """
        Pin semantic fields to deployment-configured columns.

        A pinned field is never re-detected from live rows.
        """
        if not overrides:
            return self
        fields = dict(self.fields)
        pinned = set(self.pinned)
        for name, column in overrides.items():
            fields[name] = FieldSpec(candidates=(column,), fallback=column)
            pinned.add(name)
        return TableSchema(key=self.key, fields=fields, pinned=frozenset(pinned))


def _first_record(rows: Iterable[Any] | None) -> Mapping[str, Any] | None:
    for row in rows or ():
        if isinstance(row, Mapping):
            return row
    return None


def configure_mapping(
    sample_rows: Iterable[Any] | None,
    current_map: ColumnMap,
    schema: TableSchema,
) -> ColumnMap:
    """
    Derive a ColumnMap from the first structured row of ``sample_rows``.

    With no usable row the current map is returned unchanged: an empty
    result set never erases a previously learned mapping. Fields are detected
    against the row's keys with the current map's column as the fallback, so
    every semantic key keeps resolving to some column.
    """
    sample = _first_record(sample_rows)
    if sample is None:
        return current_map

    present = set(sample.keys())
    columns: dict[str, str] = {}
    for name, spec in schema.fields.items():
        fallback = current_map.get(name) or spec.fallback
        if name in schema.pinned:
            columns[name] = spec.fallback
            continue
        columns[name] = detect_column(present, spec.candidates, fallback)
    return ColumnMap(table=current_map.table, columns=columns)


def _schema(key: str, **fields: tuple[tuple[str, ...], str]) -> TableSchema:
    return TableSchema(
        key=key,
        fields={
            name: FieldSpec(candidates=candidates, fallback=fallback)
            for name, (candidates, fallback) in fields.items()
        },
    )


ORDERS_SCHEMA = _schema(
    "orders",
    id=(("order_id", "id", "uuid"), "order_id"),
    customer=(("customer", "customer_name", "customer_full_name", "user_name"), "customer"),
    customerId=(("user_id", "customer_id"), "user_id"),
    status=(("status", "order_status", "state"), "status"),
    total=(("total", "total_amount", "amount", "total_cents", "total_price"), "total"),
    createdAt=(("created_at", "placed_at", "inserted_at", "createdAt"), "created_at"),
    notes=(("notes", "note", "comments"), "notes"),
    cafeId=(("cafe_id", "store_id"), "cafe_id"),
)

ORDER_ITEMS_SCHEMA = _schema(
    "order_items",
    orderId=(("order_id",), "order_id"),
    itemId=(("item_id", "menu_item_id", "product_id"), "item_id"),
    name=(("item_name", "name", "product_name"), "item_name"),
    quantity=(("qty", "quantity", "count"), "qty"),
)

MENU_ITEMS_SCHEMA = _schema(
    "menu_items",
    id=(("item_id", "menu_item_id", "id"), "item_id"),
    menuId=(("menu_id", "category_id", "category"), "menu_id"),
    name=(("item_name", "name", "title"), "item_name"),
    description=(("description", "details"), "description"),
    price=(("price", "unit_price", "price_cents"), "price"),
    status=(("availability", "is_available", "status", "available", "in_stock"), "availability"),
)

MENUS_SCHEMA = _schema(
    "menus",
    id=(("menu_id", "id"), "menu_id"),
    cafeId=(("cafe_id", "store_id"), "cafe_id"),
    name=(("name", "menu_name", "title"), "name"),
    description=(("description", "details"), "description"),
    active=(("is_active", "active", "enabled"), "is_active"),
    updatedAt=(("updated_at", "modified_at"), "updated_at"),
    createdAt=(("created_at", "inserted_at"), "created_at"),
)

ADMIN_SCHEMA = _schema(
    "admin",
    id=(("id", "admin_id", "user_id"), "id"),
    cafeId=(("cafe_id", "store_id"), "cafe_id"),
    name=(("name", "full_name", "display_name"), "name"),
    firstName=(("first_name", "given_name"), "first_name"),
    lastName=(("last_name", "family_name"), "last_name"),
    email=(("email",), "email"),
    role=(("role", "title"), "role"),
    createdAt=(("created_at", "inserted_at"), "created_at"),
    password=(("pwd", "password", "password_hash"), "pwd"),
)

STORES_SCHEMA = _schema(
    "stores",
    id=(("store_id", "id"), "store_id"),
    cafeId=(("cafe_id", "admin_cafe_id"), "cafe_id"),
    name=(("name", "store_name", "cafe_name", "title"), "name"),
)

ACTIVITY_SCHEMA = _schema(
    "activity",
    adminId=(("admin_id", "user_id", "actor_id"), "admin_id"),
    description=(("description", "action", "message", "summary"), "description"),
    createdAt=(("created_at", "occurred_at", "timestamp"), "created_at"),
)

SCHEMAS: dict[str, TableSchema] = {
    schema.key: schema
    for schema in (
        ORDERS_SCHEMA,
        ORDER_ITEMS_SCHEMA,
        MENU_ITEMS_SCHEMA,
        MENUS_SCHEMA,
        ADMIN_SCHEMA,
        STORES_SCHEMA,
        ACTIVITY_SCHEMA,
    )
}


class TableMapping:
    """
    Mutable holder pairing a table's schema with its currently locked map.

    Owned by one controller for the duration of a request.
    """

    def __init__(self, table: str, schema: TableSchema, overrides: Mapping[str, str] | None = None):
        self.table = table
        self.schema = schema.with_overrides(overrides)
        self.columns = self.schema.initial_map(table)
        self.detected = False

    def learn(self, rows: Iterable[Any] | None) -> ColumnMap:
        """Lock the map from the first non-empty batch; later batches are ignored."""
        if self.detected:
            return self.columns
        updated = configure_mapping(rows, self.columns, self.schema)
        if updated is not self.columns:
            self.detected = True
        self.columns = updated
        return self.columns

    def __getitem__(self, key: str) -> str:
        return self.columns[key]
