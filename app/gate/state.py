"""
Gate state machine: decides whether a request's Authorization header
admits it.

The checks run in a fixed order and stop at the first failure:

1. header present           → AUTH_HEADER_REQUIRED
2. "Bearer " scheme         → SCHEME_MISMATCH
3. non-empty credential     → CREDENTIAL_REQUIRED
   (the credential is everything after "Bearer ", minus trailing
   whitespace; whitespace-only counts as empty)
4. token decodes            → TOKEN_EXPIRED / TOKEN_INVALID

Nothing here touches the database or the HTTP layer, so the order can
be tested in isolation.  The persistence-backed revocation check lives
in `app.gate.dependencies`.
"""

import enum
from dataclasses import dataclass
from datetime import datetime

from app.core.security import ExpiredTokenError, TokenClaims, TokenError
from app.services.session_service import SessionManager

BEARER_PREFIX = "Bearer "


class GateReason(str, enum.Enum):
    AUTH_HEADER_REQUIRED = "auth_header_required"
    SCHEME_MISMATCH = "scheme_mismatch"
    CREDENTIAL_REQUIRED = "credential_required"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_INVALID = "token_invalid"
    SESSION_REVOKED = "session_revoked"


REJECTION_MESSAGES: dict[GateReason, str] = {
    GateReason.AUTH_HEADER_REQUIRED: "Authorization header is required",
    GateReason.SCHEME_MISMATCH: "Authorization header must start with 'Bearer'",
    GateReason.CREDENTIAL_REQUIRED: "Token is required",
    GateReason.TOKEN_EXPIRED: "Token has expired",
    GateReason.TOKEN_INVALID: "Invalid token",
    GateReason.SESSION_REVOKED: "Session has been revoked",
}


class GateRejected(Exception):
    """Terminal rejection of a request by the gate."""

    def __init__(self, reason: GateReason):
        self.reason = reason
        self.message = REJECTION_MESSAGES[reason]
        super().__init__(self.message)


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Identity bound to a request once the gate has admitted it."""

    user_id: int
    claims: TokenClaims


def extract_credential(header: str | None) -> str:
    """Return the bearer credential from an Authorization header value."""
    if not header:
        raise GateRejected(GateReason.AUTH_HEADER_REQUIRED)
    # HTTP servers strip trailing whitespace, so "Bearer " arrives as "Bearer".
    if header.rstrip() == BEARER_PREFIX.rstrip():
        raise GateRejected(GateReason.CREDENTIAL_REQUIRED)
    if not header.startswith(BEARER_PREFIX):
        raise GateRejected(GateReason.SCHEME_MISMATCH)

    # Only trailing whitespace is dropped; anything after the single
    # separating space belongs to the credential.
    credential = header[len(BEARER_PREFIX):].rstrip()
    if not credential:
        raise GateRejected(GateReason.CREDENTIAL_REQUIRED)
    return credential


def admit(
    header: str | None,
    manager: SessionManager,
    *,
    now: datetime | None = None,
) -> AuthenticatedIdentity:
    """Run the header through the gate; raise `GateRejected` or return the identity."""
    token = extract_credential(header)
    try:
        claims = manager.decode_and_validate(token, now=now)
    except ExpiredTokenError:
        raise GateRejected(GateReason.TOKEN_EXPIRED) from None
    except TokenError:
        raise GateRejected(GateReason.TOKEN_INVALID) from None
    return AuthenticatedIdentity(user_id=claims.user_id, claims=claims)
