"""Identity service — registration, login, and bearer sessions.

Learn: Service layer separates business logic from HTTP routing.
Routes call the service, the service talks to Redis. Everything the
service rejects is raised as a NewsLiveError subclass, which the API
layer maps to a status code.

Email uniqueness is checked through the user:email:{email} index, not
enforced by Redis. Two registrations racing on the same email can both
pass the check; that window is accepted.
"""

import asyncio
import re
import secrets
import uuid
from datetime import datetime, timezone
from typing import Optional

import redis.asyncio as aioredis
import structlog

from newslive.auth.password import hash_password, verify_password
from newslive.config import settings
from newslive.errors import AuthError, ConflictError, ValidationError
from newslive.schemas.user import PublicUser, User
from newslive.store import keys
from newslive.store.batch import WriteBatch

logger = structlog.get_logger()

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8

INVALID_CREDENTIALS = "Invalid email or password"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityService:
    """Users, password checks, and session tokens."""

    def __init__(
        self,
        redis: aioredis.Redis,
        session_ttl: int = settings.session_ttl_seconds,
    ):
        self.redis = redis
        self.session_ttl = session_ttl

    # ─── Registration / login ───────────────────────────

    async def register(
        self,
        email: Optional[str],
        username: Optional[str],
        password: Optional[str],
    ) -> tuple[PublicUser, str]:
        """Create a user and open a first session for them."""
        if not email or not username or not password:
            raise ValidationError(
                "Missing required fields: email, username, password"
            )

        email = normalize_email(email)
        username = username.strip()
        if not EMAIL_RE.match(email):
            raise ValidationError("Invalid email format")
        if not username:
            raise ValidationError("Username must not be blank")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        if await self.redis.exists(keys.user_email(email)):
            raise ConflictError("Email already registered")

        password_hash = await asyncio.to_thread(hash_password, password)
        user = User(
            id=str(uuid.uuid4()),
            email=email,
            username=username,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
        )

        async with WriteBatch(self.redis, "user.register") as pipe:
            pipe.set(keys.user(user.id), user.model_dump_json(by_alias=True))
            pipe.set(keys.user_email(email), user.id)
            pipe.sadd(keys.USERS, user.id)

        token = await self.create_session(user.id)
        logger.info("user.registered", user_id=user.id)
        return user.to_public(), token

    async def login(
        self, email: Optional[str], password: Optional[str]
    ) -> tuple[PublicUser, str]:
        """Check credentials and open a new session.

        Unknown email and wrong password fail identically, so callers
        can't probe which emails are registered. Existing sessions for
        the user stay valid.
        """
        if not email or not password:
            raise ValidationError("Missing required fields: email, password")

        user = await self.get_user_by_email(email)
        if user is None:
            raise AuthError(INVALID_CREDENTIALS)

        valid = await asyncio.to_thread(
            verify_password, password, user.password_hash
        )
        if not valid:
            logger.info("user.login_failed", user_id=user.id)
            raise AuthError(INVALID_CREDENTIALS)

        token = await self.create_session(user.id)
        logger.info("user.logged_in", user_id=user.id)
        return user.to_public(), token

    # ─── Sessions ───────────────────────────────────────

    async def create_session(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        await self.redis.set(keys.session(token), user_id, ex=self.session_ttl)
        return token

    async def logout(self, token: Optional[str]) -> None:
        """Delete the session. Unknown or missing tokens are a no-op."""
        if not token:
            return
        deleted = await self.redis.delete(keys.session(token))
        if deleted:
            logger.info("session.deleted")

    async def resolve_session(self, token: Optional[str]) -> PublicUser:
        """Return the user behind a token.

        Raises AuthError if the token was never issued, was logged out,
        or has expired (Redis drops the key once the TTL runs out).
        """
        if not token:
            raise AuthError("Missing authorization token")

        user_id = await self.redis.get(keys.session(token))
        if user_id is None:
            raise AuthError("Invalid or expired session")

        user = await self.get_user(user_id)
        if user is None:
            raise AuthError("User not found")
        return user.to_public()

    # ─── Lookups ────────────────────────────────────────

    async def get_user(self, user_id: str) -> User | None:
        raw = await self.redis.get(keys.user(user_id))
        if raw is None:
            return None
        return User.model_validate_json(raw)

    async def get_user_by_email(self, email: str) -> User | None:
        user_id = await self.redis.get(keys.user_email(normalize_email(email)))
        if user_id is None:
            return None
        return await self.get_user(user_id)
