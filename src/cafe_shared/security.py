"""
Password helpers for the table-based admin sign-in.
"""

from __future__ import annotations

import hmac

from werkzeug.security import check_password_hash, generate_password_hash

HASH_PREFIXES = ("pbkdf2:", "scrypt:")


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(stored: object, supplied: str) -> bool:
    """
    Check a supplied password against the stored admin credential.

    Older admin rows hold the password in clear text; those are compared in
    constant time until the row is re-saved with a hash.
    """
    if stored is None or not supplied:
        return False
    stored_text = str(stored)
    if stored_text.startswith(HASH_PREFIXES):
        return check_password_hash(stored_text, supplied)
    return hmac.compare_digest(stored_text.encode("utf-8"), supplied.encode("utf-8"))
