# core/passwords.py
from __future__ import annotations

from passlib.context import CryptContext

from core.errors import HashingError, PasswordMismatchError, PasswordTooLongError

DEFAULT_ROUNDS = 12
# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


class PasswordHasher:
    """
    bcrypt via passlib. The produced hash embeds its own cost
    ("$2b$12$..."), so verify() needs no configuration.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        if password_too_long(password):
            raise PasswordTooLongError(f"password exceeds {MAX_PASSWORD_BYTES} bytes")
        try:
            return self._context.hash(password)
        except OSError as exc:
            # salt generation reads the OS random source
            raise HashingError("password hashing failed") from exc

    def verify(self, password: str, hashed_password: str | None) -> None:
        # passlib compares in constant time; an unrecognised or missing hash
        # is treated exactly like a wrong password
        if password_too_long(password):
            # no stored hash came from such a password; bcrypt would truncate it
            self._context.dummy_verify()
            raise PasswordMismatchError("password does not match")
        try:
            ok = self._context.verify(password, hashed_password)
        except (ValueError, TypeError):
            ok = False
        if not ok:
            raise PasswordMismatchError("password does not match")

    def dummy_verify(self) -> None:
        self._context.dummy_verify()
