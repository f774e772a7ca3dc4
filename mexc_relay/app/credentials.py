"""Shape checks for caller-supplied MEXC credentials."""

from __future__ import annotations

MIN_KEY_LENGTH = 10


def validate_api_keys(api_key: object, secret_key: object) -> bool:
    """Return True when both values look like usable keys.

    Only the shape is checked; the exchange is the one that verifies them.
    """
    if not api_key or not secret_key:
        return False
    if not isinstance(api_key, str) or not isinstance(secret_key, str):
        return False
    if len(api_key) < MIN_KEY_LENGTH or len(secret_key) < MIN_KEY_LENGTH:
        return False
    return True
