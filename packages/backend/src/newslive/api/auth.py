"""Auth API — registration, login, logout, current user.

Learn: Routes for the session lifecycle:
- POST /auth/register → create a user, returns {user, token}
- POST /auth/login    → email/password → {user, token}
- POST /auth/logout   → delete the bearer session (never fails)
- GET  /auth/me       → {user, token} for the bearer session
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends

from newslive.auth.dependencies import (
    get_bearer_token,
    get_current_user,
    get_current_user_optional,
    get_identity_service,
)
from newslive.schemas.user import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    PublicUser,
    RegisterRequest,
)
from newslive.services.identity_service import IdentityService

logger = structlog.get_logger()
router = APIRouter(prefix="/auth")


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    svc: IdentityService = Depends(get_identity_service),
):
    """Create a new user account and log it in."""
    user, token = await svc.register(body.email, body.username, body.password)
    return AuthResponse(user=user, token=token)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    svc: IdentityService = Depends(get_identity_service),
):
    """Login with email and password → new session token."""
    user, token = await svc.login(body.email, body.password)
    return AuthResponse(user=user, token=token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: Optional[str] = Depends(get_bearer_token),
    user: Optional[PublicUser] = Depends(get_current_user_optional),
    svc: IdentityService = Depends(get_identity_service),
):
    """Invalidate the bearer session. Missing or stale tokens are fine."""
    await svc.logout(token)
    if user is not None:
        logger.info("user.logged_out", user_id=user.id)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AuthResponse)
async def get_me(
    user: PublicUser = Depends(get_current_user),
    token: Optional[str] = Depends(get_bearer_token),
):
    """Get the current authenticated user."""
    return AuthResponse(user=user, token=token)
