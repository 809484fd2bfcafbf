# core/errors.py
"""
Error taxonomy for the auth subsystem.

CredentialError: the caller presented something we refuse (bad password,
bad/expired/revoked token, wrong header scheme). The HTTP layer maps every
subclass to the same 401 response; the subclass only shows up in logs.

InfrastructureError: we could not do our job (no randomness, storage down).
Mapped to a 500, never to a credential denial.
"""
from __future__ import annotations


class AuthError(Exception):
    pass


# -------------------------------------------------------------------
# Credential failures
# -------------------------------------------------------------------
class CredentialError(AuthError):
    pass


class PasswordMismatchError(CredentialError):
    pass


class MissingHeaderError(CredentialError):
    pass


class WrongSchemeError(CredentialError):
    pass


class InvalidSignatureError(CredentialError):
    pass


class TokenExpiredError(CredentialError):
    pass


class MalformedTokenError(CredentialError):
    pass


class TokenNotFoundError(CredentialError):
    pass


class TokenRevokedError(CredentialError):
    pass


class InvalidApiKeyError(CredentialError):
    pass


# -------------------------------------------------------------------
# Infrastructure failures
# -------------------------------------------------------------------
class InfrastructureError(AuthError):
    pass


class HashingError(InfrastructureError):
    pass


class TokenGenerationError(InfrastructureError):
    pass


class PersistenceError(InfrastructureError):
    pass


# -------------------------------------------------------------------
# User-record errors (not credential related)
# -------------------------------------------------------------------
class PasswordTooLongError(ValueError):
    pass


class DuplicateEmailError(Exception):
    pass


class UserNotFoundError(Exception):
    pass
