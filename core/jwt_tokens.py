# core/jwt_tokens.py
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt

from core.errors import InvalidSignatureError, MalformedTokenError, TokenExpiredError

ISSUER = "chirpy"
ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["exp", "iat", "iss", "sub"]


def make_jwt(user_id: uuid.UUID, token_secret: str, expires_in: timedelta) -> str:
    """Sign an access token for ``user_id`` that expires ``expires_in`` from now."""
    now = datetime.now(timezone.utc)
    payload = {
        "iss": ISSUER,
        "iat": now,
        "exp": now + expires_in,
        "sub": str(user_id),
    }
    return jwt.encode(payload, token_secret, algorithm=ALGORITHM)


def validate_jwt(token: str, token_secret: str) -> uuid.UUID:
    """
    Return the user id carried by ``token``.

    PyJWT checks the signature before it looks at any claim, and the
    algorithm list is pinned so "none"/asymmetric tokens never verify.

    Raises InvalidSignatureError, TokenExpiredError or MalformedTokenError.
    """
    try:
        claims = jwt.decode(
            token,
            token_secret,
            algorithms=[ALGORITHM],
            issuer=ISSUER,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.InvalidSignatureError as exc:
        raise InvalidSignatureError("token signature mismatch") from exc
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("access token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise MalformedTokenError(f"invalid token: {type(exc).__name__}") from exc

    subject = claims["sub"]
    # older PyJWT releases do not type-check "sub" themselves
    if not isinstance(subject, str):
        raise MalformedTokenError("subject is not a user id")
    try:
        return uuid.UUID(subject)
    except ValueError as exc:
        raise MalformedTokenError("subject is not a user id") from exc
