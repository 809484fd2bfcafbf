# memory/store.py
"""
In-process user and refresh token repositories.

Same contract as models.repository, backed by dicts. Records are frozen
dataclasses swapped under a lock, so readers never observe a half-updated
record even when handlers run on several threads.
"""
from __future__ import annotations

import dataclasses
import threading
import uuid
from datetime import datetime
from typing import Dict, Optional

from core.errors import DuplicateEmailError
from core.refresh_tokens import RefreshTokenRecord, utcnow
from core.users import UserRecord


class InMemoryTokenRepository:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens: Dict[str, RefreshTokenRecord] = {}

    async def create_refresh_token(
        self, token: str, user_id: uuid.UUID, expires_at: datetime
    ) -> RefreshTokenRecord:
        record = RefreshTokenRecord(
            token=token,
            user_id=user_id,
            issued_at=utcnow(),
            expires_at=expires_at,
        )
        with self._lock:
            self._tokens[token] = record
        return record

    async def get_refresh_token_record(self, token: str) -> Optional[RefreshTokenRecord]:
        with self._lock:
            return self._tokens.get(token)

    async def mark_refresh_token_revoked(self, token: str) -> None:
        with self._lock:
            record = self._tokens.get(token)
            if record is None or record.revoked:
                return
            self._tokens[token] = dataclasses.replace(record, revoked_at=utcnow())


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: Dict[uuid.UUID, UserRecord] = {}

    def _email_taken(self, email: str, exclude: Optional[uuid.UUID] = None) -> bool:
        return any(u.email == email and u.id != exclude for u in self._users.values())

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[UserRecord]:
        with self._lock:
            return self._users.get(user_id)

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user
        return None

    async def create_user(self, email: str, hashed_password: str) -> UserRecord:
        now = utcnow()
        user = UserRecord(
            id=uuid.uuid4(),
            email=email,
            hashed_password=hashed_password,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            if self._email_taken(email):
                raise DuplicateEmailError("email already registered")
            self._users[user.id] = user
        return user

    async def update_user(
        self, user_id: uuid.UUID, email: str, hashed_password: str
    ) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            if self._email_taken(email, exclude=user_id):
                raise DuplicateEmailError("email already registered")
            user = dataclasses.replace(
                user, email=email, hashed_password=hashed_password, updated_at=utcnow()
            )
            self._users[user_id] = user
        return user

    async def upgrade_user(self, user_id: uuid.UUID) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            self._users[user_id] = dataclasses.replace(user, is_chirpy_red=True, updated_at=utcnow())
        return True
