"""
Application constants and enums.
"""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    READY = "ready"
    UNKNOWN = "unknown"

    @classmethod
    def canonical_values(cls) -> set[str]:
        return {member.value for member in cls if member is not cls.UNKNOWN}


class MenuStatus(str, Enum):
    AVAILABLE = "available"
    OUT_OF_STOCK = "out_of_stock"


class MenuActiveStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AuthMode(str, Enum):
    TABLE = "table"
    SUPABASE = "supabase"


class NoticeVariant(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


# Statuses offered by the orders board selector, in display order.
ORDER_STATUS_OPTIONS = [
    {"value": OrderStatus.PENDING.value, "label": "Pending"},
    {"value": OrderStatus.IN_PROGRESS.value, "label": "In progress"},
    {"value": OrderStatus.COMPLETED.value, "label": "Completed"},
]

ORDER_STATUS_FILTER_ALL = "all"

# Browser storage key holding the serialized admin session.
SESSION_STORAGE_KEY = "bt-admin-session"
SESSION_TEST_KEY = "__t"
CLIENT_ID_COOKIE = "console_client_id"

EMPTY_PLACEHOLDER = "—"
GUEST_CUSTOMER = "Guest customer"
DEFAULT_MENU_ITEM_NAME = "Menu item"
DEFAULT_MENU_NAME = "Menu"
DEFAULT_ADMIN_NAME = "Admin"

# PostgREST "no rows returned" code for maybe_single lookups.
POSTGREST_NO_ROWS = "PGRST116"
