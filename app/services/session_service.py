"""
Session service: the session engine.

`SessionManager` is the only component that holds the signing secret
and the only caller of the token codec on behalf of sessions.  It
handles:
- Issuing a new session (token + row) on login
- Decoding a presented bearer token
- Looking up the live session row a token was issued for
- Invalidating every session of a user (logout)

A user may hold any number of live sessions; concurrent logins do not
coordinate.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.security import TokenClaims, decode_token, encode_token
from app.models.base import utcnow
from app.models.session import UserSession
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionConfig:
    """Immutable session-engine settings, built once at startup."""

    secret: str = field(repr=False)
    algorithm: str = "HS256"
    ttl: timedelta = timedelta(hours=24)
    revocation_check: bool = True
    touch_on_use: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionConfig":
        return cls(
            secret=settings.JWT_SECRET_KEY.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            ttl=timedelta(hours=settings.SESSION_TTL_HOURS),
            revocation_check=settings.SESSION_REVOCATION_CHECK,
            touch_on_use=settings.SESSION_TOUCH_ON_USE,
        )


class SessionManager:
    def __init__(self, config: SessionConfig):
        if not config.secret:
            raise ValueError("session signing secret must not be empty")
        if config.ttl <= timedelta(0):
            raise ValueError("session ttl must be positive")
        self._config = config

    @property
    def config(self) -> SessionConfig:
        return self._config

    def __repr__(self) -> str:
        return f"<SessionManager alg={self._config.algorithm} ttl={self._config.ttl}>"

    # ── Tokens ───────────────────────────────────────────────────────

    def new_session(
        self,
        user_id: int,
        client_ip: str,
        user_agent: str,
        *,
        now: datetime | None = None,
    ) -> UserSession:
        """Sign a token for `user_id` and wrap it in an unsaved session."""
        now = now or utcnow()
        token, expires_at = encode_token(
            user_id,
            self._config.secret,
            self._config.ttl,
            algorithm=self._config.algorithm,
            now=now,
        )
        session = UserSession(user_id=user_id, expires_at=expires_at)
        session.token = token
        session.update_last_used(client_ip, user_agent, now=now)
        return session

    def decode_and_validate(self, token: str, *, now: datetime | None = None) -> TokenClaims:
        """
        Verify a presented token with the owned secret.

        `ExpiredTokenError` and `InvalidTokenError` propagate unchanged;
        translating them is the gate's job.
        """
        return decode_token(token, self._config.secret, now=now)

    # ── Persistence ──────────────────────────────────────────────────

    async def issue(
        self,
        user: User,
        client_ip: str,
        user_agent: str,
        db: AsyncSession,
    ) -> UserSession:
        """Create and store a fresh session for `user`."""
        session = self.new_session(user.id, client_ip, user_agent)
        db.add(session)
        await db.flush()
        logger.info("Issued session %s for user %s (expires %s)", session.id, user.id, session.expires_at)
        return session

    async def invalidate(self, user_id: int, db: AsyncSession) -> int:
        """
        Soft-delete every live session belonging to `user_id`.

        Returns the number of sessions affected.  There is no
        single-device logout: all of the user's sessions go at once.
        """
        now = utcnow()
        stmt = (
            update(UserSession)
            .where(
                UserSession.user_id == user_id,
                UserSession.deleted_at.is_(None),
            )
            .values(deleted_at=now, updated_at=now)
        )
        result = await db.execute(stmt)
        await db.flush()
        logger.info("Invalidated %d session(s) for user %s", result.rowcount, user_id)
        return result.rowcount

    async def find_live_session(self, claims: TokenClaims, db: AsyncSession) -> UserSession | None:
        """Return the non-deleted session the token in `claims` was issued for."""
        stmt = (
            select(UserSession)
            .where(
                UserSession.user_id == claims.user_id,
                UserSession.expires_at == claims.expires_at,
                UserSession.deleted_at.is_(None),
            )
            .order_by(UserSession.id.desc())
            .limit(1)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_live_sessions(
        self,
        user_id: int,
        db: AsyncSession,
        *,
        now: datetime | None = None,
    ) -> list[UserSession]:
        """Return the unexpired, non-deleted sessions of a user, newest first."""
        stmt = (
            select(UserSession)
            .where(
                UserSession.user_id == user_id,
                UserSession.deleted_at.is_(None),
                UserSession.expires_at > (now or utcnow()),
            )
            .order_by(UserSession.id.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())
