# api/auth.py
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, Response
from pydantic import BaseModel, EmailStr, Field

from core.auth_service import AuthService
from core.auth_utils import client_key, enforce_rate_limit, get_auth_service
from core.headers import get_bearer_token

router = APIRouter(prefix="/api", tags=["auth"])


# -------------------------------
# Schemas
# -------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

class LoginResponse(BaseModel):
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    email: str
    is_chirpy_red: bool
    token: str
    refresh_token: str

class RefreshResponse(BaseModel):
    token: str


def _norm_email(email: str) -> str:
    return (email or "").strip().lower()


# -------------------------------
# Login
# -------------------------------
@router.post("/login", response_model=LoginResponse)
async def login(req: LoginRequest, request: Request, auth: AuthService = Depends(get_auth_service)):
    enforce_rate_limit(request.app.state.login_limiter, client_key(request, "login"))

    # unknown email and wrong password fail the same way (401)
    result = await auth.login(_norm_email(req.email), req.password)
    user = result.user
    return LoginResponse(
        id=user.id,
        created_at=user.created_at,
        updated_at=user.updated_at,
        email=user.email,
        is_chirpy_red=user.is_chirpy_red,
        token=result.token,
        refresh_token=result.refresh_token,
    )


# -------------------------------
# Refresh (no rotation)
# -------------------------------
@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
):
    enforce_rate_limit(request.app.state.refresh_limiter, client_key(request, "refresh"))

    token = await auth.refresh(get_bearer_token(authorization))
    return RefreshResponse(token=token)


# -------------------------------
# Revoke
# -------------------------------
@router.post("/revoke", status_code=204)
async def revoke(
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
):
    await auth.revoke(get_bearer_token(authorization))
    return Response(status_code=204)
