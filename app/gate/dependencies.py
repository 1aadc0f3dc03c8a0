"""
Gate dependencies: what protected routes declare.

Usage in a route:
    @router.get("/me")
    async def me(identity: AuthenticatedIdentity = Depends(require_identity)): ...

`require_identity`:
1. Runs the header state machine (`app.gate.state.admit`).
2. Optionally checks the token still has a live session row, so a
   logged-out token stops working before it expires.
3. Optionally refreshes the session's last-used bookkeeping.
4. Binds the identity to `request.state.identity` for anything
   downstream that only has the request (see `get_user_id`).
"""

import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.gate.state import AuthenticatedIdentity, GateReason, GateRejected, admit
from app.services.session_service import SessionManager

logger = logging.getLogger(__name__)


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def client_ip(request: Request) -> str:
    return request.client.host if request.client else ""


async def require_identity(
    request: Request,
    manager: SessionManager = Depends(get_session_manager),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedIdentity:
    try:
        identity = admit(request.headers.get("Authorization"), manager)

        if manager.config.revocation_check:
            session = await manager.find_live_session(identity.claims, db)
            if session is None:
                raise GateRejected(GateReason.SESSION_REVOKED)
            if manager.config.touch_on_use:
                session.update_last_used(client_ip(request), request.headers.get("User-Agent", ""))
    except GateRejected as exc:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.reason.value)
        raise

    request.state.identity = identity
    return identity


def get_user_id(request: Request) -> int:
    """
    User id bound by the gate, or 0 when the request carries no
    identity (or something other than an `AuthenticatedIdentity`).
    Never raises.
    """
    identity = getattr(request.state, "identity", None)
    if isinstance(identity, AuthenticatedIdentity):
        return identity.user_id
    return 0
