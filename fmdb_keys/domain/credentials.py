"""API key generation."""

import secrets

API_KEY_BYTES = 16


def generate_api_key() -> str:
    """
    Generate a cryptographically secure API key.

    Draws 128 bits from the secrets module and returns them as a
    32-character lowercase hex string.
    """
    return secrets.token_hex(API_KEY_BYTES)
