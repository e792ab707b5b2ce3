"""
Display helpers for timestamps, currency and numeric coercion.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from cafe_shared.constants import EMPTY_PLACEHOLDER

DEFAULT_DATETIME_FORMAT = "%b %d, %Y %H:%M"


def parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    # PostgREST emits "+00:00" offsets; older Python rejects a trailing "Z".
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_datetime(value: Any, fmt: str = DEFAULT_DATETIME_FORMAT) -> str:
    """
    Render a timestamp for display.

    Empty or unparseable input renders as the em-dash placeholder.
    """
    if value is None or value == "":
        return EMPTY_PLACEHOLDER
    parsed = parse_datetime(value)
    if parsed is None:
        return EMPTY_PLACEHOLDER
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime(fmt)


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite float, guarding NaN, infinities and garbage."""
    if isinstance(value, bool):
        return default
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(numeric) or math.isinf(numeric):
        return default
    return numeric


def to_quantity(value: Any) -> int:
    """Positive integer quantity, defaulting to 1."""
    numeric = to_number(value, 1.0)
    quantity = int(numeric)
    return quantity if quantity >= 1 else 1


def format_currency(amount: Any) -> str:
    if isinstance(amount, bool):
        return EMPTY_PLACEHOLDER
    try:
        numeric = float(amount)
    except (TypeError, ValueError):
        return EMPTY_PLACEHOLDER
    if not math.isfinite(numeric):
        return EMPTY_PLACEHOLDER
    return f"${numeric:.2f}"


def first_identifier(*values: Any) -> Any:
    """First value that is neither None nor blank; ``0`` counts as an identifier."""
    for value in values:
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return None
