# settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    polka_key: str
    db_url: str = "sqlite+aiosqlite:///./chirpy.db"
    access_token_ttl: timedelta = timedelta(hours=1)
    refresh_token_ttl: timedelta = timedelta(days=60)
    bcrypt_rounds: int = 12
    db_echo: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Read process-wide configuration from the environment (and .env).

    Secrets are read once here and passed explicitly into the components
    that need them; nothing downstream reads os.environ.
    """
    jwt_secret = os.getenv("JWT_SECRET", "").strip()
    polka_key = os.getenv("POLKA_KEY", "").strip()

    if not jwt_secret:
        raise RuntimeError("Missing JWT_SECRET environment variable")
    if not polka_key:
        raise RuntimeError("Missing POLKA_KEY environment variable")

    return Settings(
        jwt_secret=jwt_secret,
        polka_key=polka_key,
        db_url=os.getenv("DB_URL", "sqlite+aiosqlite:///./chirpy.db"),
        access_token_ttl=timedelta(seconds=int(os.getenv("ACCESS_TOKEN_TTL_SECONDS", "3600"))),
        refresh_token_ttl=timedelta(days=int(os.getenv("REFRESH_TOKEN_DAYS", "60"))),
        bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
        db_echo=os.getenv("DB_ECHO", "0").strip().lower() in ("1", "true", "yes"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
