"""
Pydantic schemas for request / response serialization.

Kept in a single file for now; split per-domain when it grows.
Schemas are deliberately decoupled from SQLAlchemy models so the
API surface can evolve independently of the DB layer.  No output
schema carries the password hash.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

PASSWORD_MIN_LENGTH = 6


# ── Auth ─────────────────────────────────────────────────────────────
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)


# ── User ─────────────────────────────────────────────────────────────
class UserOut(BaseModel):
    id: int
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    user: UserOut


# ── Session ──────────────────────────────────────────────────────────
class SessionOut(BaseModel):
    id: int
    user_id: int
    token: str | None = None
    expires_at: datetime
    last_used_at: datetime
    last_used_ip: str
    last_used_loc: str

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    user: UserOut
    session: SessionOut


class IdentityOut(BaseModel):
    user_id: int
    expires_at: datetime


# ── Generic ──────────────────────────────────────────────────────────
class MessageResponse(BaseModel):
    message: str
