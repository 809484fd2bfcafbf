#main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from api.auth import router as auth_router
from api.errors import register_error_handlers
from api.users import router as users_router
from api.webhooks import router as webhooks_router
from core.database import build_engine, build_sessionmaker, create_tables
from core.passwords import PasswordHasher
from core.rate_limit import TokenBucketLimiter
from settings import Settings, get_settings


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory. Run with `uvicorn main:create_app --factory`;
    tests pass their own Settings.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = build_engine(settings.db_url, echo=settings.db_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await create_tables(engine)
        yield
        await engine.dispose()

    app = FastAPI(title="Chirpy", lifespan=lifespan)
    app.state.settings = settings
    app.state.sessionmaker = build_sessionmaker(engine)
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.login_limiter = TokenBucketLimiter(rate=5, per_seconds=60, capacity=10)      # 5/min, burst 10
    app.state.refresh_limiter = TokenBucketLimiter(rate=10, per_seconds=60, capacity=20)   # 10/min, burst 20

    register_error_handlers(app)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(webhooks_router)

    @app.get("/api/healthz", response_class=PlainTextResponse)
    def health():
        return "OK"

    return app
