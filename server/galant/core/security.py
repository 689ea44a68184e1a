"""Verification of access tokens issued by the external identity provider."""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from galant.config import settings


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a bearer token.

    Raises:
        ValueError: If the token is invalid, expired or lacks an email claim
    """
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e}") from e

    if not payload.get("email"):
        raise ValueError("Token has no email claim")
    return payload


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Issue a token the way the identity provider does (used by tests and local tooling)."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=30))
    to_encode["exp"] = expire
    if settings.JWT_AUDIENCE is not None:
        to_encode["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
