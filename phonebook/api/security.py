"""Authentication utilities for API routes."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from phonebook.api.dependencies import get_person_service
from phonebook.core.exceptions import UnauthorizedError
from phonebook.core.security import INVALID_TOKEN_MESSAGE, verify_access_token
from phonebook.models import Identity
from phonebook.services import PersonService

# Only "Authorization: Bearer <token>" is accepted; other schemes count as no token.
_http_bearer = HTTPBearer(auto_error=False)


def decode_identity(token: str) -> Identity:
    payload = verify_access_token(token)
    subject = payload.get("id")
    if not subject:
        raise UnauthorizedError(INVALID_TOKEN_MESSAGE)
    return Identity(id=str(subject), username=payload.get("username"))


async def require_identity(
    request: Request,
    bearer_token: Optional[HTTPAuthorizationCredentials] = Depends(_http_bearer),
) -> Identity:
    if not bearer_token or not bearer_token.credentials:
        raise UnauthorizedError(INVALID_TOKEN_MESSAGE)
    identity = decode_identity(bearer_token.credentials)
    request.state.identity = identity
    return identity


async def optional_identity(
    request: Request,
    bearer_token: Optional[HTTPAuthorizationCredentials] = Depends(_http_bearer),
    service: PersonService = Depends(get_person_service),
) -> Optional[Identity]:
    """Resolve the caller only when the ownership policy needs it.

    With the policy off, get and update ignore the Authorization header, so an
    expired or malformed token is not an error there.
    """

    if not service.enforce_ownership:
        return None
    if not bearer_token or not bearer_token.credentials:
        return None
    return await require_identity(request, bearer_token)


__all__ = ["decode_identity", "optional_identity", "require_identity"]
