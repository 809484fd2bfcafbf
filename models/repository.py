# models/repository.py
"""
SQLAlchemy-backed implementations of the user and refresh token
repositories. One instance per request, bound to that request's session.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import DuplicateEmailError, PersistenceError
from core.refresh_tokens import RefreshTokenRecord, as_utc, utcnow
from core.users import UserRecord
from models.refresh_token import RefreshToken
from models.user import User


def _user_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        email=user.email,
        hashed_password=user.hashed_password,
        created_at=as_utc(user.created_at),
        updated_at=as_utc(user.updated_at),
        is_chirpy_red=bool(user.is_chirpy_red),
    )


def _token_record(rt: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        token=rt.token,
        user_id=rt.user_id,
        issued_at=as_utc(rt.created_at),
        expires_at=as_utc(rt.expires_at),
        revoked_at=as_utc(rt.revoked_at) if rt.revoked_at is not None else None,
    )


class SqlTokenRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def create_refresh_token(
        self, token: str, user_id: uuid.UUID, expires_at: datetime
    ) -> RefreshTokenRecord:
        rt = RefreshToken(token=token, user_id=user_id, expires_at=expires_at)
        try:
            self._session.add(rt)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise PersistenceError("could not store refresh token") from exc
        return _token_record(rt)

    async def get_refresh_token_record(self, token: str) -> Optional[RefreshTokenRecord]:
        try:
            result = await self._session.execute(
                select(RefreshToken)
                .where(RefreshToken.token == token)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as exc:
            raise PersistenceError("could not read refresh token") from exc
        rt = result.scalars().first()
        return _token_record(rt) if rt else None

    async def mark_refresh_token_revoked(self, token: str) -> None:
        # single conditional UPDATE: racing revokes all succeed, first timestamp sticks
        now = utcnow()
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token == token, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        try:
            await self._session.execute(stmt)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise PersistenceError("could not revoke refresh token") from exc


class SqlUserRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get(self, user_id: uuid.UUID) -> Optional[User]:
        try:
            return await self._session.get(User, user_id, populate_existing=True)
        except SQLAlchemyError as exc:
            raise PersistenceError("could not read user") from exc

    async def _commit(self) -> None:
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise DuplicateEmailError("email already registered") from exc
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise PersistenceError("could not store user") from exc

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[UserRecord]:
        user = await self._get(user_id)
        return _user_record(user) if user else None

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        try:
            result = await self._session.execute(select(User).where(User.email == email))
        except SQLAlchemyError as exc:
            raise PersistenceError("could not read user") from exc
        user = result.scalars().first()
        return _user_record(user) if user else None

    async def create_user(self, email: str, hashed_password: str) -> UserRecord:
        user = User(email=email, hashed_password=hashed_password)
        self._session.add(user)
        await self._commit()
        return _user_record(user)

    async def update_user(
        self, user_id: uuid.UUID, email: str, hashed_password: str
    ) -> Optional[UserRecord]:
        user = await self._get(user_id)
        if user is None:
            return None
        user.email = email
        user.hashed_password = hashed_password
        await self._commit()
        return _user_record(user)

    async def upgrade_user(self, user_id: uuid.UUID) -> bool:
        user = await self._get(user_id)
        if user is None:
            return False
        user.is_chirpy_red = True
        await self._commit()
        return True
