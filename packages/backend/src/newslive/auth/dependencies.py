"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract and
validate the current user from the `Authorization: Bearer <token>`
header. The token is looked up in Redis on every request.

- get_current_user: hard auth, raises AuthError (→ 401).
- get_current_user_optional: soft auth, returns None on any auth
  failure instead of failing the request.
"""

from typing import Optional

import redis.asyncio as aioredis
from fastapi import Depends, Header

from newslive.errors import AuthError
from newslive.schemas.user import PublicUser
from newslive.services.identity_service import IdentityService
from newslive.store.connection import get_redis


def get_identity_service(
    redis: aioredis.Redis = Depends(get_redis),
) -> IdentityService:
    return IdentityService(redis)


def get_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """The raw token from the Authorization header, or None."""
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:].strip()
        return token or None
    return None


async def get_current_user(
    authorization: Optional[str] = Header(None),
    svc: IdentityService = Depends(get_identity_service),
) -> PublicUser:
    """Resolve the session behind the bearer token (required)."""
    token = get_bearer_token(authorization)
    if token is None:
        raise AuthError("Missing or invalid authorization header")
    return await svc.resolve_session(token)


async def get_current_user_optional(
    authorization: Optional[str] = Header(None),
    svc: IdentityService = Depends(get_identity_service),
) -> Optional[PublicUser]:
    """Resolve the session if there is one; never fails on bad auth."""
    token = get_bearer_token(authorization)
    if token is None:
        return None
    try:
        return await svc.resolve_session(token)
    except AuthError:
        return None
