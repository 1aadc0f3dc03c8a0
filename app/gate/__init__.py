"""Request gate for protected routes."""

from app.gate.dependencies import get_session_manager, get_user_id, require_identity
from app.gate.state import AuthenticatedIdentity, GateReason, GateRejected

__all__ = [
    "AuthenticatedIdentity",
    "GateReason",
    "GateRejected",
    "get_session_manager",
    "get_user_id",
    "require_identity",
]
