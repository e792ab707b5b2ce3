"""
Orders board: recent orders with their line items, and status updates.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from cafe_console.context import ConsoleContext
from cafe_console.services.table_utils import distinct_values, prime_mapping
from cafe_shared.constants import (
    ORDER_STATUS_FILTER_ALL,
    ORDER_STATUS_OPTIONS,
    NoticeVariant,
    OrderStatus,
)
from cafe_shared.errors import IdentifierError, Notice, ValidationError
from cafe_shared.schemas import OrderStatusRequest
from cafe_shared.serializers import serialize_order, success_response
from cafe_shared.status import format_status, normalize_order_status
from cafe_shared.supabase.client import DataClient
from cafe_shared.view_models import (
    OrderLineItem,
    build_order_status_payload,
    group_line_items,
    map_item_names,
    map_order_row,
    parse_identifier,
)

logger = logging.getLogger(__name__)


def _status_filter(raw: str | None) -> str | None:
    if raw is None or not str(raw).strip() or str(raw).strip().lower() == ORDER_STATUS_FILTER_ALL:
        return None
    status = normalize_order_status(raw)
    if status not in OrderStatus.canonical_values() and status != OrderStatus.UNKNOWN.value:
        raise ValidationError(f"Unsupported order status filter: {raw}")
    return status


def _fetch_item_names(
    console: ConsoleContext, client: DataClient, item_ids: list[Any]
) -> dict[Any, str]:
    if not item_ids:
        return {}
    items = console.mapping("menu_items")
    prime_mapping(client, items)
    result = client.from_(items.table).select("*").in_(items["id"], item_ids).execute()
    if result.error:
        logger.warning(f"Unable to load item names: {result.error}")
        return {}
    return map_item_names(result.rows, items.learn(result.rows))


def fetch_line_items(
    console: ConsoleContext, client: DataClient, order_ids: list[Any]
) -> dict[Any, list[OrderLineItem]]:
    """
    Line items grouped by order id.

    Any failure here degrades to orders without items rather than failing the board.
    """
    if not order_ids:
        return {}
    lines = console.mapping("order_items")
    prime_mapping(client, lines)
    result = client.from_(lines.table).select("*").in_(lines["orderId"], order_ids).execute()
    if result.error:
        logger.warning(f"Unable to load order items: {result.error}")
        return {}

    columns = lines.learn(result.rows)
    names = _fetch_item_names(console, client, distinct_values(result.rows, columns, "itemId"))
    return group_line_items(result.rows, columns, names)


def list_orders(console: ConsoleContext, status: str | None = None) -> tuple[dict, HTTPStatus]:
    """Most recent orders, newest first, optionally narrowed to one status."""
    selected = _status_filter(status)
    client = console.require_client()
    orders = console.mapping("orders")
    prime_mapping(client, orders)

    result = (
        client.from_(orders.table)
        .select("*")
        .order(orders["createdAt"], desc=True)
        .limit(console.config.orders_limit)
        .execute()
        .raise_for_error()
    )
    rows = result.rows
    columns = orders.learn(rows)
    items_by_order = fetch_line_items(console, client, distinct_values(rows, columns, "id"))

    mapped = [
        map_order_row(row, columns, items_by_order, console.config.datetime_format)
        for row in rows
    ]
    visible = mapped
    if selected is not None:
        visible = [order for order in mapped if order.status == selected]

    empty_message = None
    if not mapped:
        empty_message = "No orders found in Supabase yet."
    elif not visible:
        empty_message = "No orders match this status."

    logger.info(f"Loaded {len(mapped)} orders ({len(visible)} shown)")
    return (
        success_response(
            {
                "orders": [serialize_order(order) for order in visible],
                "total_count": len(mapped),
                "status_filter": selected or ORDER_STATUS_FILTER_ALL,
                "status_options": ORDER_STATUS_OPTIONS,
                "empty_message": empty_message,
            }
        ),
        HTTPStatus.OK,
    )


def update_status(
    console: ConsoleContext, order_id: Any, payload: dict[str, Any]
) -> tuple[dict, HTTPStatus]:
    """
    Write a normalized status to one order, then re-read it.

    Raises:
        IdentifierError: when no order matches ``order_id``
        BackendError: when the update or re-read fails (ORDER_001)
    """
    request_data = OrderStatusRequest.model_validate(payload)
    identifier = parse_identifier(order_id)
    if identifier is None:
        raise IdentifierError()

    client = console.require_client()
    orders = console.mapping("orders")
    columns = prime_mapping(client, orders)

    updated = (
        client.from_(orders.table)
        .update(build_order_status_payload(request_data.status, columns))
        .eq(columns["id"], identifier)
        .execute()
        .raise_for_error("ORDER_001")
    )
    if not updated.rows:
        raise IdentifierError(f"Order #{identifier} was not found.")

    refreshed = (
        client.from_(orders.table)
        .select("*")
        .eq(columns["id"], identifier)
        .execute()
        .raise_for_error("ORDER_001")
    )
    row = refreshed.rows[0] if refreshed.rows else updated.rows[0]
    columns = orders.learn([row])
    items_by_order = fetch_line_items(console, client, [identifier])
    order = map_order_row(row, columns, items_by_order, console.config.datetime_format)

    logger.info(f"Order {identifier} status set to {order.status}")
    notice = Notice(
        message=f"Order #{identifier} marked as {format_status(order.status)}.",
        variant=NoticeVariant.SUCCESS.value,
    )
    return success_response(serialize_order(order), notice=notice), HTTPStatus.OK
