"""
Authentication service.

Handles:
- Registration (unique email, bcrypt-hashed password)
- Login (credential check, then a new session from the SessionManager)
- Logout (every session of the authenticated user is invalidated)

Shape validation (email syntax, password length) happens in the request
schemas before anything here runs.  Login failures are deliberately
generic so callers cannot probe which emails are registered.

All business logic lives here; controllers call service functions
and return the result.
"""

import logging

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import hash_password, verify_password
from app.models.session import UserSession
from app.models.user import User
from app.services.session_service import SessionManager

logger = logging.getLogger(__name__)


async def get_user_by_email(email: str, db: AsyncSession) -> User | None:
    stmt = select(User).where(
        User.email == email,
        User.deleted_at.is_(None),
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


# ── Register ─────────────────────────────────────────────────────────

async def register_user(email: str, password: str, db: AsyncSession) -> User:
    if await get_user_by_email(email, db) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    user = User(email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email.
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        ) from None

    logger.info("Registered user %s", user.id)
    return user


# ── Login ────────────────────────────────────────────────────────────

async def authenticate_user(
    email: str,
    password: str,
    client_ip: str,
    user_agent: str,
    manager: SessionManager,
    db: AsyncSession,
) -> tuple[User, UserSession]:
    """Validate credentials and issue a brand-new session."""
    user = await get_user_by_email(email, db)

    if user is None or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    session = await manager.issue(user, client_ip, user_agent, db)
    return user, session


# ── Logout ───────────────────────────────────────────────────────────

async def logout_user(user_id: int, manager: SessionManager, db: AsyncSession) -> int:
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return await manager.invalidate(user_id, db)
