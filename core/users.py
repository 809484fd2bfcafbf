# core/users.py
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass(frozen=True)
class UserRecord:
    id: uuid.UUID
    email: str
    hashed_password: str
    created_at: datetime
    updated_at: datetime
    is_chirpy_red: bool = False


class UserRepository(Protocol):
    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[UserRecord]: ...

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]: ...

    async def create_user(self, email: str, hashed_password: str) -> UserRecord: ...

    async def update_user(
        self, user_id: uuid.UUID, email: str, hashed_password: str
    ) -> Optional[UserRecord]: ...

    async def upgrade_user(self, user_id: uuid.UUID) -> bool: ...
