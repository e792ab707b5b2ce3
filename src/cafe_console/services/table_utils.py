"""
Helpers shared by the console services for reading reconciled tables.
"""

from __future__ import annotations

import logging
from typing import Any

from cafe_shared.reconciler import ColumnMap, TableMapping
from cafe_shared.supabase.client import DataClient

logger = logging.getLogger(__name__)


def prime_mapping(client: DataClient, mapping: TableMapping) -> ColumnMap:
    """
    Lock ``mapping`` from a one-row sample before filtering on mapped columns.

    A failed sample keeps the current map; the real query reports the error.
    """
    if mapping.detected:
        return mapping.columns
    result = client.from_(mapping.table).select("*").limit(1).execute()
    if result.error:
        logger.warning(f"Unable to sample '{mapping.table}' for column detection: {result.error}")
        return mapping.columns
    return mapping.learn(result.rows)


def distinct_values(rows: list[Any], columns: ColumnMap, key: str) -> list[Any]:
    """Non-null values of one semantic field, first-seen order."""
    seen: list[Any] = []
    for row in rows:
        value = columns.value(row, key)
        if value is not None and value not in seen:
            seen.append(value)
    return seen
