"""
User model.

Owned by the credential handlers; the session engine only ever reads
`id`.  `password_hash` is bcrypt output and never leaves the service
layer.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, composite, mapped_column

from app.models.base import Base, RecordMeta, record_columns


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(256), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(512), nullable=False)

    created_at, updated_at, deleted_at = record_columns()
    meta = composite(RecordMeta, created_at, updated_at, deleted_at)

    def __repr__(self) -> str:
        return f"<User {self.email}>"
