"""
Declarative base & shared record metadata.

Every table carries the same bookkeeping columns:
- `created_at` / `updated_at` timestamps (UTC, auto-managed).
- `deleted_at`, the soft-delete marker.  Rows with a value here are
  treated as gone by every query.

Models declare the columns themselves (see `record_columns`) and group
them into a `RecordMeta` value through a composite attribute, so the
bookkeeping travels as one object instead of through a shared parent
class.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, MappedColumn, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base: all models inherit from this."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RecordMeta:
    created_at: datetime | None
    updated_at: datetime | None
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


def record_columns() -> tuple[MappedColumn, MappedColumn, MappedColumn]:
    """Fresh `created_at`, `updated_at`, `deleted_at` column definitions."""
    created_at = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )
    deleted_at = mapped_column(DateTime(timezone=True), nullable=True)
    return created_at, updated_at, deleted_at
