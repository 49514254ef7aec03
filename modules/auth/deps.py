"""
Auth Module - Dependencies
===========================
FastAPI dependencies that identify the current principal.
These are injected into route handlers via Depends().

Token lookup order: `auth_token` cookie, then `Authorization: Bearer ...`.
"""

from typing import Optional

from fastapi import Request, Depends, HTTPException, status

from common.security import decode_token
from modules.user.models import Principal


def _token_from_request(request: Request) -> Optional[str]:
    token = request.cookies.get("auth_token")
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value:
        return value.strip()
    return None


def get_current_principal(request: Request) -> Optional[Principal]:
    """
    Identify the current principal from the auth token.
    Returns Principal or None (anonymous).
    """
    token = _token_from_request(request)
    if not token:
        return None

    payload = decode_token(token)
    if not payload:
        return None

    return Principal.from_claims(payload)


def require_login(principal=Depends(get_current_principal)) -> Principal:
    """Require any signed-in principal. Raises 401 if anonymous."""
    if not principal:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="login_required")
    return principal
