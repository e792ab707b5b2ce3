"""
Status vocabulary normalization for orders and menu items.

Both normalizers are total and idempotent: any input yields a value, and
feeding a normalized value back in returns it unchanged.
"""

from __future__ import annotations

import re
from typing import Any

from cafe_shared.constants import MenuStatus, OrderStatus

_NON_LETTERS = re.compile(r"[^a-z]+")

ORDER_STATUS_SYNONYMS = {
    "in-progress": OrderStatus.IN_PROGRESS.value,
    "in transit": OrderStatus.IN_PROGRESS.value,
    "in_transit": OrderStatus.IN_PROGRESS.value,
    "done": OrderStatus.COMPLETED.value,
    "canceled": OrderStatus.CANCELLED.value,
}

MENU_AVAILABLE_SYNONYMS = {"available", "in_stock", "in-stock"}
MENU_OUT_OF_STOCK_SYNONYMS = {"out_of_stock", "sold_out", "unavailable", "out-of-stock"}


def _sanitize(value: str) -> str:
    return _NON_LETTERS.sub("_", value).strip("_")


def _resolve_order_status(value: str) -> str | None:
    if value in OrderStatus.canonical_values() or value == OrderStatus.UNKNOWN.value:
        return value
    return ORDER_STATUS_SYNONYMS.get(value)


def _resolve_menu_status(value: str) -> str | None:
    if value in MENU_AVAILABLE_SYNONYMS:
        return MenuStatus.AVAILABLE.value
    if value in MENU_OUT_OF_STOCK_SYNONYMS:
        return MenuStatus.OUT_OF_STOCK.value
    return None


def normalize_order_status(raw: Any) -> str:
    if raw is None or raw is False or raw == "":
        return OrderStatus.UNKNOWN.value
    normalized = str(raw).strip().lower()
    resolved = _resolve_order_status(normalized)
    if resolved:
        return resolved
    sanitized = _sanitize(normalized)
    return _resolve_order_status(sanitized) or sanitized or OrderStatus.UNKNOWN.value


def normalize_menu_status(raw: Any) -> str:
    if isinstance(raw, bool):
        return MenuStatus.AVAILABLE.value if raw else MenuStatus.OUT_OF_STOCK.value
    if raw is None or raw == "":
        return MenuStatus.AVAILABLE.value
    normalized = str(raw).strip().lower()
    resolved = _resolve_menu_status(normalized)
    if resolved:
        return resolved
    sanitized = _sanitize(normalized)
    return _resolve_menu_status(sanitized) or sanitized or MenuStatus.AVAILABLE.value


def format_status(status: str | None) -> str:
    """``in_progress`` -> ``In Progress``."""
    if not status:
        return ""
    return " ".join(part.capitalize() for part in status.replace("_", " ").split())
