"""
Password hashing & the JWT token codec.

- Passwords are hashed with bcrypt directly (passlib is unmaintained
  and broken with bcrypt>=4.1).
- Tokens carry `user_id` plus the registered temporal claims
  (`iat`, `nbf`, `exp`) and nothing else.
- Only HMAC signatures are accepted on decode, whatever the token
  header claims.
- Decode failures are raised as `TokenError` subclasses so callers can
  tell an expired token from a forged or malformed one.
"""

import math
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt
from jose.constants import ALGORITHMS
from jose.exceptions import JOSEError
from pydantic import BaseModel, Field, StrictInt, ValidationError

# ── Password hashing ────────────────────────────────────────────────

# bcrypt only looks at the first 72 bytes; newer releases raise instead
# of truncating.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


# ── Token codec ──────────────────────────────────────────────────────

HMAC_ALGORITHMS = sorted(ALGORITHMS.HMAC)


class TokenError(Exception):
    """Base class for every token decode failure."""


class InvalidTokenError(TokenError):
    """Bad signature, wrong algorithm, malformed structure or claims."""


class ExpiredTokenError(TokenError):
    """Correctly signed token whose `exp` is not in the future."""


class TokenClaims(BaseModel):
    """Verified payload of a session token."""

    user_id: StrictInt = Field(gt=0)
    iat: StrictInt
    nbf: StrictInt
    exp: StrictInt

    model_config = {"frozen": True, "extra": "ignore"}

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=timezone.utc)

    @property
    def issued_at(self) -> datetime:
        return datetime.fromtimestamp(self.iat, tz=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _numeric_date(moment: datetime) -> int:
    return int(moment.timestamp())


def encode_token(
    user_id: int,
    secret: str,
    ttl: timedelta,
    *,
    algorithm: str = "HS256",
    now: datetime | None = None,
) -> tuple[str, datetime]:
    """
    Sign a session token for `user_id` valid for `ttl` from `now`.

    Returns the token and its expiry.  The expiry is read back from the
    `exp` claim, so it is exactly what `decode_token` will enforce.
    """
    if ttl <= timedelta(0):
        raise ValueError("ttl must be positive")
    if algorithm not in ALGORITHMS.HMAC:
        raise ValueError(f"unsupported signing algorithm {algorithm!r}")

    now = now or _utcnow()
    issued = _numeric_date(now)
    claims = {
        "user_id": user_id,
        "iat": issued,
        "nbf": issued,
        # Rounded up so the token outlives `now + ttl`, however short the ttl.
        "exp": math.ceil((now + ttl).timestamp()),
    }
    token = jwt.encode(claims, secret, algorithm=algorithm)
    return token, datetime.fromtimestamp(claims["exp"], tz=timezone.utc)


def decode_token(token: str, secret: str, *, now: datetime | None = None) -> TokenClaims:
    """
    Verify `token` against `secret` and return its claims.

    Raises `ExpiredTokenError` when the signature checks out but
    `now >= exp`, and `InvalidTokenError` for everything else.
    """
    try:
        # `algorithms` makes jose refuse any header alg outside the list,
        # including "none" and the asymmetric families.
        payload = jwt.decode(
            token,
            secret,
            algorithms=HMAC_ALGORITHMS,
            options={"verify_exp": False, "verify_nbf": False, "verify_iat": False},
        )
    except JOSEError as exc:
        raise InvalidTokenError(str(exc)) from exc

    try:
        claims = TokenClaims.model_validate(payload)
    except ValidationError as exc:
        raise InvalidTokenError("malformed token claims") from exc

    current = _numeric_date(now or _utcnow())
    if current >= claims.exp:
        raise ExpiredTokenError("token has expired")
    if current < claims.nbf:
        raise InvalidTokenError("token is not valid yet")
    return claims
