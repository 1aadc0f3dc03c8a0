"""
User session model: one row per successful login.

Tracks issued sessions per user, enabling:
- Server-side invalidation on logout (soft delete of every row the
  user owns)
- Last-used bookkeeping (time, client IP, user agent)

The bearer token itself is not stored.  `expires_at` always equals the
token's `exp` claim, which is what ties a presented token back to its
row.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, composite, mapped_column

from app.models.base import Base, RecordMeta, record_columns, utcnow


class UserSession(Base):
    __tablename__ = "user_sessions"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_used_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_used_ip: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    last_used_loc: Mapped[str] = mapped_column(String(512), nullable=False, default="")

    created_at, updated_at, deleted_at = record_columns()
    meta = composite(RecordMeta, created_at, updated_at, deleted_at)

    # Signed bearer token; only set on sessions issued in this process.
    token = None

    __table_args__ = (
        Index("ix_user_sessions_user_live", "user_id", "deleted_at"),
    )

    def update_last_used(self, ip: str, location: str, *, now: datetime | None = None) -> None:
        self.last_used_at = now or utcnow()
        self.last_used_ip = ip[:64]
        self.last_used_loc = location[:512]

    def __repr__(self) -> str:
        return f"<UserSession id={self.id} user={self.user_id} expires={self.expires_at}>"
