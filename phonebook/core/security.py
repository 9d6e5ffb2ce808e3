"""Token signing and verification for the Phonebook service."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from phonebook.core.config import settings
from phonebook.core.exceptions import UnauthorizedError

INVALID_TOKEN_MESSAGE = "Token missing or invalid"


def create_access_token(
    user_id: str,
    username: Optional[str] = None,
    expires_delta: timedelta | None = None,
) -> str:
    payload: Dict[str, Any] = {"id": user_id}
    if username is not None:
        payload["username"] = username

    lifetime = expires_delta
    if lifetime is None and settings.ACCESS_TOKEN_EXPIRE_MINUTES:
        lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    if lifetime is not None:
        payload["exp"] = datetime.utcnow() + lifetime

    return jwt.encode(payload, settings.SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_access_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise UnauthorizedError(INVALID_TOKEN_MESSAGE) from exc


__all__ = ["INVALID_TOKEN_MESSAGE", "create_access_token", "verify_access_token"]
