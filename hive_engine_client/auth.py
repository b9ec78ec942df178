"""
JWT bearer tokens that authorize calls on the engine endpoint.

Each token carries a single `iat` claim and is HS256-signed with the secret shared with the
execution client. Clients reject tokens whose `iat` is too far from their own clock, so a
token is minted right before every call and never reused.
"""

import time
from datetime import datetime
from typing import Any, Dict

import jwt

from hive_engine_base_types import to_bytes

from .errors import AuthorizationError, SigningError

JWT_ALGORITHM = "HS256"

MAX_CLOCK_SKEW = 60
"""Seconds an `iat` claim may differ from the verifier's clock."""


def secret_bytes(secret: bytes | str) -> bytes:
    """Return the raw secret; strings are read as hex, as found in `jwtsecret` files."""
    if isinstance(secret, str):
        try:
            secret = to_bytes(secret.strip())
        except ValueError as e:
            raise SigningError(f"JWT secret is not valid hex: {e}") from e
    if not isinstance(secret, (bytes, bytearray)):
        raise SigningError(f"JWT secret must be bytes, got {type(secret).__name__}")
    if len(secret) == 0:
        raise SigningError("JWT secret is empty")
    return bytes(secret)


def _timestamp(moment: datetime | float | int) -> int:
    if isinstance(moment, datetime):
        return int(moment.timestamp())
    return int(moment)


def mint_token(secret: bytes | str, iat: datetime | float | int) -> str:
    """Sign a token with the single claim `iat` using the shared secret."""
    key = secret_bytes(secret)
    try:
        return jwt.encode({"iat": _timestamp(iat)}, key, algorithm=JWT_ALGORITHM)
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise SigningError(f"unable to sign JWT token: {e}") from e


def verify_token(
    token: str,
    secret: bytes | str,
    now: datetime | float | int | None = None,
    max_skew: int = MAX_CLOCK_SKEW,
) -> Dict[str, Any]:
    """
    Verify the signature and freshness of a token and return its claims.

    Raises `AuthorizationError` when the token was signed with another secret, lacks an `iat`
    claim, or was issued more than `max_skew` seconds away from `now`.
    """
    key = secret_bytes(secret)
    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["iat"], "verify_iat": False},
        )
    except jwt.PyJWTError as e:
        raise AuthorizationError(f"invalid JWT token: {e}") from e
    if now is None:
        now = time.time()
    skew = abs(_timestamp(now) - int(claims["iat"]))
    if skew > max_skew:
        raise AuthorizationError(f"JWT token issued {skew}s away from now, max is {max_skew}s")
    return claims


class TokenIssuer:
    """Mints a fresh bearer token for every authorized call."""

    def __init__(self, secret: bytes | str):
        """Bind the issuer to the secret shared with the client; it is validated on every mint."""
        self.secret = secret

    def mint(self, iat: datetime | float | int | None = None) -> str:
        """Return a token issued at `iat`, or now."""
        return mint_token(self.secret, time.time() if iat is None else iat)

    def authorization_header(self) -> Dict[str, str]:
        """Return the `Authorization` header carrying a freshly minted token."""
        return {"Authorization": f"Bearer {self.mint()}"}
