# core/refresh_tokens.py
from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from core.errors import (
    TokenExpiredError,
    TokenGenerationError,
    TokenNotFoundError,
    TokenRevokedError,
)

logger = logging.getLogger(__name__)

REFRESH_TOKEN_BYTES = 32


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we write is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class RefreshTokenRecord:
    token: str
    user_id: uuid.UUID
    issued_at: datetime
    expires_at: datetime
    revoked_at: Optional[datetime] = None

    @property
    def revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now >= as_utc(self.expires_at)


class TokenRepository(Protocol):
    async def create_refresh_token(
        self, token: str, user_id: uuid.UUID, expires_at: datetime
    ) -> RefreshTokenRecord: ...

    async def get_refresh_token_record(self, token: str) -> Optional[RefreshTokenRecord]: ...

    async def mark_refresh_token_revoked(self, token: str) -> None: ...


def new_refresh_token_raw() -> str:
    # 32 bytes from the OS CSPRNG, hex encoded (64 chars)
    try:
        return secrets.token_hex(REFRESH_TOKEN_BYTES)
    except (OSError, NotImplementedError) as exc:
        raise TokenGenerationError("random source unavailable") from exc


class RefreshTokenStore:
    """
    Opaque, long-lived, revocable refresh tokens.

    Validity is decided at lookup time: revoked beats expired, and nothing
    ever moves a token back to active. The repository owns the persisted
    state; this class holds none of its own.
    """

    def __init__(self, repository: TokenRepository):
        self._repository = repository

    async def issue(self, user_id: uuid.UUID, ttl: timedelta) -> str:
        raw = new_refresh_token_raw()
        await self._repository.create_refresh_token(raw, user_id, utcnow() + ttl)
        logger.debug("issued refresh token for user %s", user_id)
        return raw

    async def lookup(self, token: str) -> RefreshTokenRecord:
        record = await self._repository.get_refresh_token_record(token)
        if record is None:
            raise TokenNotFoundError("unknown refresh token")
        if record.revoked:
            raise TokenRevokedError("refresh token revoked")
        if record.is_expired(utcnow()):
            raise TokenExpiredError("refresh token expired")
        return record

    async def revoke(self, token: str) -> None:
        # existence only: expired or already-revoked tokens are still revocable
        record = await self._repository.get_refresh_token_record(token)
        if record is None:
            raise TokenNotFoundError("unknown refresh token")
        if record.revoked:
            return
        await self._repository.mark_refresh_token_revoked(token)
        logger.info("revoked refresh token for user %s", record.user_id)
