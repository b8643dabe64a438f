"""
FastAPI dependency providers.

All injectable dependencies are plain functions used with FastAPI's
Depends() system; the objects themselves are built once in create_app()'s
lifespan and kept on app.state.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from errors import AuthenticationError
from infrastructure.identity.protocol import IdentityProvider, IdentityTokenInvalid
from schemas.models.caller import CallerIdentity
from services.recovery_service import RecoveryService
from shared.logging import get_logger

log = get_logger(__name__)


def get_recovery_service(request: Request) -> RecoveryService:
    return request.app.state.recovery_service


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity


async def get_caller(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> CallerIdentity:
    """Resolve the caller from an ``Authorization: Bearer <ID token>`` header.

    No header → anonymous caller (authorization decides what that means).
    A header that fails verification → AuthenticationError (401).
    """
    if not authorization:
        return CallerIdentity.anonymous()

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authorization header must be 'Bearer <token>'.")

    identity = get_identity_provider(request)
    try:
        claims = await identity.verify_id_token(token.strip())
    except IdentityTokenInvalid as e:
        log.warning("caller_token_rejected", error=str(e))
        raise AuthenticationError("Invalid or expired ID token.") from e

    return CallerIdentity(uid=claims.get("uid"), claims=claims)
