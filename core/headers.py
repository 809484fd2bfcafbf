# core/headers.py
"""
Authorization header parsing.

Two schemes, two functions: end-user tokens ("Bearer ") and the backend
service key ("ApiKey "). An endpoint calls exactly the one it expects, so a
service key can never be presented where a user token is required and vice
versa. Prefixes are case-sensitive with a single space.
"""
from __future__ import annotations

from typing import Optional

from core.errors import MissingHeaderError, WrongSchemeError

BEARER_PREFIX = "Bearer "
API_KEY_PREFIX = "ApiKey "


def _cut_prefix(header_value: Optional[str], prefix: str) -> str:
    if not header_value:
        raise MissingHeaderError("empty Authorization header")
    if not header_value.startswith(prefix):
        raise WrongSchemeError(f"expected {prefix.strip()} scheme")
    return header_value[len(prefix):]


def get_bearer_token(header_value: Optional[str]) -> str:
    return _cut_prefix(header_value, BEARER_PREFIX)


def get_api_key(header_value: Optional[str]) -> str:
    return _cut_prefix(header_value, API_KEY_PREFIX)
