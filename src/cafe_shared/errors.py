"""
Centralized error catalog and exception types for the café admin console.

Every failure the console surfaces to an operator is described here once:
the HTTP status it maps to, the message shown in the notice banner, and
whether the notice stays until dismissed.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from http import HTTPStatus
from typing import Any

from cafe_shared.constants import NoticeVariant

ERROR_CATALOG: dict[str, dict[str, Any]] = {
    "CONFIG_001": {
        "title": "Supabase credentials missing",
        "message": (
            "Supabase credentials are missing. Set SUPABASE_URL and SUPABASE_ANON_KEY "
            "before using the admin console."
        ),
        "http_code": HTTPStatus.SERVICE_UNAVAILABLE,
        "variant": NoticeVariant.ERROR,
        "sticky": True,
    },
    "AUTH_001": {
        "title": "Invalid credentials",
        "message": "Incorrect email or password. Please try again.",
        "http_code": HTTPStatus.UNAUTHORIZED,
        "variant": NoticeVariant.ERROR,
        "sticky": False,
    },
    "AUTH_002": {
        "title": "Authentication required",
        "message": "Your session has ended. Please sign in again.",
        "http_code": HTTPStatus.UNAUTHORIZED,
        "variant": NoticeVariant.WARNING,
        "sticky": False,
    },
    "AUTH_003": {
        "title": "Account creation failed",
        "message": (
            "Unable to create your admin account because of a database issue. "
            "Please try again later."
        ),
        "http_code": HTTPStatus.BAD_GATEWAY,
        "variant": NoticeVariant.ERROR,
        "sticky": False,
    },
    "AUTH_004": {
        "title": "Credential check failed",
        "message": (
            "Unable to check your credentials because of a database issue. "
            "Please try again later."
        ),
        "http_code": HTTPStatus.BAD_GATEWAY,
        "variant": NoticeVariant.ERROR,
        "sticky": False,
    },
    "DATA_001": {
        "title": "Query failed",
        "message": "Unable to load data from Supabase. Please try again.",
        "http_code": HTTPStatus.BAD_GATEWAY,
        "variant": NoticeVariant.ERROR,
        "sticky": False,
    },
    "DATA_002": {
        "title": "Invalid input",
        "message": "Please check the highlighted fields and try again.",
        "http_code": HTTPStatus.BAD_REQUEST,
        "variant": NoticeVariant.WARNING,
        "sticky": False,
    },
    "MENU_001": {
        "title": "Menu save failed",
        "message": "Unable to save the menu. Check Supabase configuration.",
        "http_code": HTTPStatus.BAD_GATEWAY,
        "variant": NoticeVariant.ERROR,
        "sticky": True,
    },
    "MENU_002": {
        "title": "Menu item save failed",
        "message": "Unable to save the menu item. Check Supabase configuration.",
        "http_code": HTTPStatus.BAD_GATEWAY,
        "variant": NoticeVariant.ERROR,
        "sticky": True,
    },
    "MENU_003": {
        "title": "Identifier unknown",
        "message": "Unable to determine the record identifier for this change.",
        "http_code": HTTPStatus.NOT_FOUND,
        "variant": NoticeVariant.ERROR,
        "sticky": False,
    },
    "MENU_004": {
        "title": "Menu item delete failed",
        "message": "Unable to delete the menu item. Check Supabase configuration.",
        "http_code": HTTPStatus.BAD_GATEWAY,
        "variant": NoticeVariant.ERROR,
        "sticky": True,
    },
    "MENU_005": {
        "title": "Menu delete failed",
        "message": "Unable to delete the menu. Check Supabase configuration.",
        "http_code": HTTPStatus.BAD_GATEWAY,
        "variant": NoticeVariant.ERROR,
        "sticky": True,
    },
    "ORDER_001": {
        "title": "Status update failed",
        "message": "Unable to update order status. Please try again.",
        "http_code": HTTPStatus.BAD_GATEWAY,
        "variant": NoticeVariant.ERROR,
        "sticky": False,
    },
    "SYSTEM_001": {
        "title": "Internal error",
        "message": "Something went wrong. Please try again.",
        "http_code": HTTPStatus.INTERNAL_SERVER_ERROR,
        "variant": NoticeVariant.ERROR,
        "sticky": False,
    },
}


@dataclass(frozen=True)
class Notice:
    """Operator-facing banner message."""

    message: str
    variant: str = NoticeVariant.INFO.value
    sticky: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def notice_for(code: str, message: str | None = None) -> Notice:
    entry = ERROR_CATALOG.get(code, ERROR_CATALOG["SYSTEM_001"])
    return Notice(
        message=message or entry["message"],
        variant=NoticeVariant(entry["variant"]).value,
        sticky=bool(entry["sticky"]),
    )


class ConsoleError(Exception):
    """Base class for failures that are translated into a notice."""

    code = "SYSTEM_001"

    def __init__(self, message: str | None = None, *, code: str | None = None):
        if code:
            self.code = code
        self.user_message = message
        super().__init__(message or ERROR_CATALOG[self.code]["message"])

    @property
    def http_status(self) -> HTTPStatus:
        return HTTPStatus(ERROR_CATALOG[self.code]["http_code"])

    @property
    def notice(self) -> Notice:
        return notice_for(self.code, self.user_message)


class ConfigurationError(ConsoleError):
    """Backend credentials are absent; the console cannot reach Supabase."""

    code = "CONFIG_001"


class AuthenticationError(ConsoleError):
    code = "AUTH_001"


class SessionError(ConsoleError):
    code = "AUTH_002"


class ValidationError(ConsoleError):
    """Raised when validation fails."""

    code = "DATA_002"


class IdentifierError(ConsoleError):
    code = "MENU_003"


class BackendError(ConsoleError):
    """A Supabase query or mutation came back with an error."""

    code = "DATA_001"

    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        backend_code: str | None = None,
        details: str | None = None,
        code: str | None = None,
    ):
        self.table = table
        self.backend_code = backend_code
        self.details = details
        self.backend_message = message
        super().__init__(None, code=code)

    def __str__(self) -> str:
        where = f" on '{self.table}'" if self.table else ""
        suffix = f" ({self.backend_code})" if self.backend_code else ""
        return f"{self.backend_message}{where}{suffix}"

    def with_code(self, code: str) -> BackendError:
        """Re-tag the error for the operation that failed, keeping backend details."""
        return BackendError(
            self.backend_message,
            table=self.table,
            backend_code=self.backend_code,
            details=self.details,
            code=code,
        )
