# api/errors.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.errors import (
    CredentialError,
    DuplicateEmailError,
    InfrastructureError,
    InvalidApiKeyError,
    PasswordTooLongError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


# Routes authenticated with the service key rather than a user token.
SERVICE_PATH_PREFIX = "/api/polka/"


def error_response(message: str, status: int, headers: dict | None = None) -> JSONResponse:
    return JSONResponse({"detail": message}, status_code=status, headers=headers)


def challenge_scheme(request: Request, exc: CredentialError) -> str:
    if isinstance(exc, InvalidApiKeyError) or request.url.path.startswith(SERVICE_PATH_PREFIX):
        return "ApiKey"
    return "Bearer"


def register_error_handlers(app: FastAPI) -> None:
    # Every credential failure looks the same on the wire; the kind is for logs only.
    @app.exception_handler(CredentialError)
    async def credential_error(request: Request, exc: CredentialError):
        logger.info("credential rejected on %s %s: %s", request.method, request.url.path, type(exc).__name__)
        return error_response("Unauthorized", 401, headers={"WWW-Authenticate": challenge_scheme(request, exc)})

    @app.exception_handler(InfrastructureError)
    async def infrastructure_error(request: Request, exc: InfrastructureError):
        logger.error("infrastructure failure on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response("Something went wrong", 500)

    @app.exception_handler(PasswordTooLongError)
    async def password_too_long(request: Request, exc: PasswordTooLongError):
        return error_response(str(exc), 400)

    @app.exception_handler(DuplicateEmailError)
    async def duplicate_email(request: Request, exc: DuplicateEmailError):
        return error_response("User already exists", 400)

    @app.exception_handler(UserNotFoundError)
    async def user_not_found(request: Request, exc: UserNotFoundError):
        return error_response("User not found", 404)
