"""
Input validation utilities.
"""

import math
import re

from cafe_shared.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
MIN_PASSWORD_LENGTH = 6


def validate_email(email: str) -> None:
    """Validate email format."""
    if not email:
        raise ValidationError("Please provide both email and password.")

    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Email address format is invalid.")


def validate_password(password: str) -> None:
    """Supabase rejects passwords shorter than six characters."""
    if not password:
        raise ValidationError("Please provide both email and password.")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )


def validate_price(price: float) -> None:
    if not math.isfinite(price):
        raise ValidationError("Price must be a valid number.")
    if price < 0:
        raise ValidationError("Price cannot be negative.")
