"""
RS256 JWT access tokens.

Only access tokens are issued. ``sub`` is the profile id and ``username``
rides along so clients can render the signed-in user without a lookup.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any

import jwt

from golong.config import get_settings

ACCESS_TOKEN_TYPE = "access"


@lru_cache(maxsize=1)
def _load_keys() -> tuple[str, str]:
    """(private PEM, public PEM) read from the configured paths."""
    settings = get_settings()
    return (
        Path(settings.jwt_private_key_path).read_text(),
        Path(settings.jwt_public_key_path).read_text(),
    )


def reset_keys() -> None:
    """Drop the cached key pair; the next sign or verify re-reads disk."""
    _load_keys.cache_clear()


def create_access_token(profile_id: str, username: str) -> str:
    private_key, _ = _load_keys()
    settings = get_settings()
    issued_at = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "sub": profile_id,
        "username": username,
        "type": ACCESS_TOKEN_TYPE,
        "iss": settings.jwt_issuer,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.jwt_access_token_expire_minutes),
    }
    return jwt.encode(claims, private_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Decode an access token and return its claims.

    Raises:
        jwt.InvalidTokenError: bad signature, wrong issuer, expired, or a
            token whose ``type`` is not ``access``.
    """
    _, public_key = _load_keys()
    settings = get_settings()
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            public_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    token_type = claims.get("type")
    if token_type != ACCESS_TOKEN_TYPE:
        msg = f"Expected an access token, got '{token_type}'"
        raise jwt.InvalidTokenError(msg)
    return claims
