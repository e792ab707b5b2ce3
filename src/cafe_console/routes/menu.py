"""
Menu API - menus and their menu items.
"""

from flask import Blueprint, jsonify, request

from cafe_console.context import get_console
from cafe_console.decorators import current_admin_session, dashboard_required
from cafe_console.services.menu_service import (
    create_item,
    create_menu,
    delete_item,
    delete_menu,
    list_items,
    list_menus,
    update_item,
    update_menu,
)

menu_bp = Blueprint("menu", __name__)


# ==================== MENUS ====================


@menu_bp.get("/menus")
@dashboard_required
def get_menus():
    response, status = list_menus(get_console())
    return jsonify(response), status


@menu_bp.post("/menus")
@dashboard_required
def post_menu():
    """
    Create a menu.

    Body: name, cafe_id (defaults to the signed-in admin's cafe), description, status
    """
    payload = request.get_json(silent=True) or {}
    response, status = create_menu(get_console(), payload, current_admin_session())
    return jsonify(response), status


@menu_bp.put("/menus/<menu_id>")
@dashboard_required
def put_menu(menu_id: str):
    payload = request.get_json(silent=True) or {}
    response, status = update_menu(get_console(), menu_id, payload, current_admin_session())
    return jsonify(response), status


@menu_bp.delete("/menus/<menu_id>")
@dashboard_required
def delete_menu_endpoint(menu_id: str):
    response, status = delete_menu(get_console(), menu_id)
    return jsonify(response), status


# ==================== MENU ITEMS ====================


@menu_bp.get("/menus/<menu_id>/items")
@dashboard_required
def get_menu_items(menu_id: str):
    response, status = list_items(get_console(), menu_id)
    return jsonify(response), status


@menu_bp.post("/menus/<menu_id>/items")
@dashboard_required
def post_menu_item(menu_id: str):
    """
    Create a menu item.

    Body: name, price, description, status (available | out_of_stock)
    """
    payload = request.get_json(silent=True) or {}
    response, status = create_item(get_console(), menu_id, payload)
    return jsonify(response), status


@menu_bp.put("/menu-items/<item_id>")
@dashboard_required
def put_menu_item(item_id: str):
    payload = request.get_json(silent=True) or {}
    response, status = update_item(get_console(), item_id, payload)
    return jsonify(response), status


@menu_bp.delete("/menu-items/<item_id>")
@dashboard_required
def delete_menu_item_endpoint(item_id: str):
    response, status = delete_item(get_console(), item_id)
    return jsonify(response), status
