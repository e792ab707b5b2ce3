"""
Blueprints for the admin console.
"""

from cafe_console.routes.auth import auth_bp
from cafe_console.routes.dashboard import dashboard_bp
from cafe_console.routes.health import health_bp
from cafe_console.routes.menu import menu_bp
from cafe_console.routes.orders import orders_bp
from cafe_console.routes.profile import profile_bp

ALL_BLUEPRINTS = (health_bp, auth_bp, dashboard_bp, orders_bp, menu_bp, profile_bp)

__all__ = ["ALL_BLUEPRINTS"]
