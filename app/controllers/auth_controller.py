"""
Auth controller: register, login, logout & session introspection.

Register and login are PUBLIC.  Everything else goes through the gate
(`require_identity`).
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.gate.dependencies import client_ip, get_session_manager, get_user_id, require_identity
from app.gate.state import AuthenticatedIdentity
from app.schemas import (
    IdentityOut,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    SessionOut,
    UserOut,
)
from app.services import auth_service
from app.services.session_service import SessionManager

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create an account.  The response never includes the password."""
    user = await auth_service.register_user(body.email, body.password, db)
    return RegisterResponse(user=UserOut.model_validate(user))


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
):
    """Authenticate with email + password → receive a new session and its bearer token."""
    user, session = await auth_service.authenticate_user(
        body.email,
        body.password,
        client_ip(request),
        request.headers.get("User-Agent", ""),
        manager,
        db,
    )
    return LoginResponse(
        user=UserOut.model_validate(user),
        session=SessionOut.model_validate(session),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
):
    """Invalidate every session of the current user."""
    await auth_service.logout_user(get_user_id(request), manager, db)
    return MessageResponse(message="Successfully logged out")


@router.get("/me", response_model=IdentityOut)
async def me(identity: AuthenticatedIdentity = Depends(require_identity)):
    return IdentityOut(user_id=identity.user_id, expires_at=identity.claims.expires_at)


@router.get("/sessions", response_model=list[SessionOut])
async def list_sessions(
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
):
    """Live sessions of the current user, newest first.  Tokens are not included."""
    sessions = await manager.list_live_sessions(identity.user_id, db)
    return [SessionOut.model_validate(s) for s in sessions]
