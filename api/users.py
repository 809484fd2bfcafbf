# api/users.py
from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field, field_validator

from core.auth_service import AuthService
from core.auth_utils import get_auth_service, get_current_user_id
from core.passwords import MAX_PASSWORD_BYTES, password_too_long
from core.users import UserRecord

router = APIRouter(prefix="/api/users", tags=["users"])


class UserCredentials(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value

class UserResponse(BaseModel):
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    email: str
    is_chirpy_red: bool

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserResponse":
        return cls(
            id=user.id,
            created_at=user.created_at,
            updated_at=user.updated_at,
            email=user.email,
            is_chirpy_red=user.is_chirpy_red,
        )


def _norm_email(email: str) -> str:
    return (email or "").strip().lower()


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(req: UserCredentials, auth: AuthService = Depends(get_auth_service)):
    user = await auth.register(_norm_email(req.email), req.password)
    return UserResponse.from_record(user)


@router.put("", response_model=UserResponse)
async def update_user(
    req: UserCredentials,
    user_id: uuid.UUID = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    user = await auth.update_credentials(user_id, _norm_email(req.email), req.password)
    return UserResponse.from_record(user)
