# core/auth_service.py
from __future__ import annotations

import asyncio
import hmac
import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from core.errors import InvalidApiKeyError, PasswordMismatchError, UserNotFoundError
from core.headers import get_api_key, get_bearer_token
from core.jwt_tokens import make_jwt, validate_jwt
from core.passwords import PasswordHasher
from core.refresh_tokens import RefreshTokenStore
from core.users import UserRecord, UserRepository

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TTL = timedelta(hours=1)
REFRESH_TOKEN_TTL = timedelta(days=60)


@dataclass(frozen=True)
class LoginResult:
    user: UserRecord
    token: str
    refresh_token: str


class AuthService:
    """
    Login / refresh / revoke flows built from the hasher, the JWT codec and
    the refresh token store.

    Refresh tokens are not rotated: a refresh token keeps minting access
    tokens until it is revoked or reaches its expiry.
    """

    def __init__(
        self,
        users: UserRepository,
        refresh_tokens: RefreshTokenStore,
        hasher: PasswordHasher,
        token_secret: str,
        api_key: str,
        access_token_ttl: timedelta = ACCESS_TOKEN_TTL,
        refresh_token_ttl: timedelta = REFRESH_TOKEN_TTL,
    ):
        self._users = users
        self._refresh_tokens = refresh_tokens
        self._hasher = hasher
        self._token_secret = token_secret
        self._api_key = api_key
        self._access_token_ttl = access_token_ttl
        self._refresh_token_ttl = refresh_token_ttl

    # -----------------------
    # Accounts
    # -----------------------
    async def register(self, email: str, password: str) -> UserRecord:
        hashed = await asyncio.to_thread(self._hasher.hash, password)
        user = await self._users.create_user(email, hashed)
        logger.info("registered user %s", user.id)
        return user

    async def update_credentials(self, user_id: uuid.UUID, email: str, password: str) -> UserRecord:
        hashed = await asyncio.to_thread(self._hasher.hash, password)
        user = await self._users.update_user(user_id, email, hashed)
        if user is None:
            raise UserNotFoundError(str(user_id))
        return user

    # -----------------------
    # Token lifecycle
    # -----------------------
    async def login(self, email: str, password: str) -> LoginResult:
        user = await self._users.get_user_by_email(email)
        if user is None:
            # same cost as a real check so unknown emails are not distinguishable by timing
            await asyncio.to_thread(self._hasher.dummy_verify)
            raise PasswordMismatchError("invalid credentials")

        await asyncio.to_thread(self._hasher.verify, password, user.hashed_password)

        token = make_jwt(user.id, self._token_secret, self._access_token_ttl)
        refresh = await self._refresh_tokens.issue(user.id, self._refresh_token_ttl)
        logger.info("user %s logged in", user.id)
        return LoginResult(user=user, token=token, refresh_token=refresh)

    async def refresh(self, refresh_token: str) -> str:
        record = await self._refresh_tokens.lookup(refresh_token)
        return make_jwt(record.user_id, self._token_secret, self._access_token_ttl)

    async def revoke(self, refresh_token: str) -> None:
        await self._refresh_tokens.revoke(refresh_token)

    # -----------------------
    # Request authentication
    # -----------------------
    def authenticate(self, authorization: Optional[str]) -> uuid.UUID:
        token = get_bearer_token(authorization)
        return validate_jwt(token, self._token_secret)

    def authenticate_service(self, authorization: Optional[str]) -> None:
        key = get_api_key(authorization)
        # an unset key must never match an empty presented key
        if not self._api_key or not hmac.compare_digest(key.encode("utf-8"), self._api_key.encode("utf-8")):
            raise InvalidApiKeyError("api key mismatch")
