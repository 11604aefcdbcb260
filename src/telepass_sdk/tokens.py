"""Local inspection of bearer tokens.

Claims are decoded WITHOUT signature verification. This only lets the
client pre-empt obviously expired credentials before a network call; it is
not an authentication check and must never be treated as one. The server
remains the sole authority on whether a token is valid.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import jwt

from .telemetry import get_logger


def decode_unverified_claims(token: str) -> dict[str, Any]:
    """Decode a JWT payload without verifying its signature.

    Args:
        token: Bearer token value.

    Returns:
        The claims mapping, or an empty mapping for opaque or malformed
        tokens.
    """
    try:
        claims = jwt.decode(
            token,
            options={
                "verify_signature": False,
                "verify_exp": False,
                "verify_aud": False,
                "verify_iat": False,
                "verify_nbf": False,
            },
        )
    except jwt.exceptions.InvalidTokenError as e:
        get_logger().warning("Could not parse token for expiry check", error=str(e))
        return {}
    return claims if isinstance(claims, dict) else {}


def expiry_from_claims(claims: dict[str, Any]) -> datetime | None:
    """Extract the ``exp`` claim as an aware datetime, if present and numeric."""
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return datetime.fromtimestamp(exp, tz=UTC)
