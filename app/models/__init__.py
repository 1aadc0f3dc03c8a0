"""
Models package: import every model so SQLAlchemy's Base.metadata
knows about all tables (critical for Alembic and test schema setup).
"""

from app.models.base import Base, RecordMeta
from app.models.session import UserSession
from app.models.user import User

__all__ = [
    "Base",
    "RecordMeta",
    "User",
    "UserSession",
]
