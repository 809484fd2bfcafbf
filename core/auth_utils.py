# core/auth_utils.py
"""
FastAPI dependencies that wire the auth components to a request.

Secrets come from app.state.settings (set once in create_app); repositories
are bound to the request's DB session.
"""
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth_service import AuthService
from core.database import get_async_session
from core.rate_limit import TokenBucketLimiter
from core.refresh_tokens import RefreshTokenStore
from models.repository import SqlTokenRepository, SqlUserRepository


def get_auth_service(
    request: Request,
    session: AsyncSession = Depends(get_async_session),
) -> AuthService:
    settings = request.app.state.settings
    return AuthService(
        users=SqlUserRepository(session),
        refresh_tokens=RefreshTokenStore(SqlTokenRepository(session)),
        hasher=request.app.state.password_hasher,
        token_secret=settings.jwt_secret,
        api_key=settings.polka_key,
        access_token_ttl=settings.access_token_ttl,
        refresh_token_ttl=settings.refresh_token_ttl,
    )


def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> uuid.UUID:
    """
    Returns the authenticated user id (JWT 'sub').

    Missing header, wrong scheme, bad signature, expired or malformed token
    all raise a CredentialError, which the app turns into a plain 401.
    """
    return auth.authenticate(authorization)


def require_service_key(
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> None:
    auth.authenticate_service(authorization)


def client_key(request: Request, action: str) -> str:
    ip = request.client.host if request.client else "unknown"
    return f"{action}:{ip}"


def enforce_rate_limit(limiter: TokenBucketLimiter, key: str) -> None:
    if not limiter.allow(key):
        raise HTTPException(
            status_code=429,
            detail="Too many attempts. Try again shortly.",
            headers={"Retry-After": str(max(1, limiter.retry_after(key)))},
        )
