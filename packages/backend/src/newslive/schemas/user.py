"""Pydantic schemas for users and auth.

Learn: `User` is the stored document and includes the password hash.
`PublicUser` is what leaves the API — it has no password_hash field
at all, so it can't leak through a response by accident.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

_camel = {"alias_generator": to_camel, "populate_by_name": True}


class PublicUser(BaseModel):
    id: str
    email: str
    username: str
    created_at: datetime

    model_config = _camel


class User(PublicUser):
    password_hash: str

    def to_public(self) -> PublicUser:
        return PublicUser.model_validate(self.model_dump(exclude={"password_hash"}))


# ─── Requests ────────────────────────────────────────────


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# ─── Responses ───────────────────────────────────────────


class AuthResponse(BaseModel):
    user: PublicUser
    token: str


class MessageResponse(BaseModel):
    message: str
