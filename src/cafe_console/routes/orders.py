"""
Orders board API.
"""

from flask import Blueprint, jsonify, request

from cafe_console.context import get_console
from cafe_console.decorators import dashboard_required
from cafe_console.services.order_service import list_orders, update_status

orders_bp = Blueprint("orders", __name__)


@orders_bp.get("/orders")
@dashboard_required
def get_orders():
    """
    Recent orders with line items.

    Query params:
        status: pending | in_progress | completed | ... | all
    """
    response, status = list_orders(get_console(), request.args.get("status"))
    return jsonify(response), status


@orders_bp.patch("/orders/<order_id>/status")
@dashboard_required
def patch_order_status(order_id: str):
    payload = request.get_json(silent=True) or {}
    response, status = update_status(get_console(), order_id, payload)
    return jsonify(response), status
