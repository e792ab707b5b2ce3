"""
Pydantic schemas for request validation.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from cafe_shared.constants import MenuStatus, OrderStatus
from cafe_shared.errors import ValidationError
from cafe_shared.formatting import to_number
from cafe_shared.status import normalize_menu_status, normalize_order_status
from cafe_shared.validation import validate_email, validate_password, validate_price
from cafe_shared.view_models import parse_identifier


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase to ensure consistent authentication."""
        return v.strip().lower()

    @model_validator(mode="after")
    def require_credentials(self):
        if not self.email or not self.password:
            raise ValidationError("Please provide both email and password.")
        validate_email(self.email)
        return self


class SignupRequest(BaseModel):
    name: str = ""
    cafe_id: str | int | None = None
    email: str = ""
    password: str = ""
    confirm_password: str = ""

    @field_validator("name", "email")
    @classmethod
    def strip_text(cls, v):
        return v.strip()

    @model_validator(mode="after")
    def check_fields(self):
        if not self.name or self.cafe_id in (None, "") or not self.email or not self.password:
            raise ValidationError("Please complete all required fields.")
        validate_email(self.email)
        validate_password(self.password)
        if self.password != self.confirm_password:
            raise ValidationError("Passwords do not match.")
        self.email = self.email.lower()
        self.cafe_id = parse_identifier(self.cafe_id)
        return self


class MenuItemRequest(BaseModel):
    name: str = ""
    menu_id: str | int | None = None
    description: str | None = None
    price: float | int | str | None = None
    status: str = Field(default="available")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return v.strip()

    @field_validator("status")
    @classmethod
    def normalize_status(cls, v):
        normalized = normalize_menu_status(v or MenuStatus.AVAILABLE.value)
        if normalized not in {status.value for status in MenuStatus}:
            raise ValidationError(f"Unsupported menu item status: {v}")
        return normalized

    @model_validator(mode="after")
    def check_fields(self):
        self.menu_id = parse_identifier(self.menu_id)
        if not self.name or self.menu_id is None:
            raise ValidationError("Please provide both a menu ID and item name.")
        price = None if self.price in (None, "") else to_number(self.price, None)
        if price is None:
            raise ValidationError("Price must be a valid number.")
        validate_price(price)
        self.price = price
        if self.description is not None:
            self.description = self.description.strip() or None
        return self


class MenuRequest(BaseModel):
    name: str = ""
    cafe_id: str | int | None = None
    description: str | None = None
    status: Literal["active", "inactive"] = "active"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return v.strip()

    @model_validator(mode="after")
    def check_fields(self):
        self.cafe_id = parse_identifier(self.cafe_id)
        if self.description is not None:
            self.description = self.description.strip() or None
        return self


class OrderStatusRequest(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def normalize_status(cls, v):
        normalized = normalize_order_status(v)
        if normalized not in OrderStatus.canonical_values():
            raise ValidationError(f"Unsupported order status: {v}")
        return normalized
