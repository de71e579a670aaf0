"""Password hashing (argon2id) and strength rules."""

from __future__ import annotations

import argon2

from golong.config import get_settings

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=64 * 1024,
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)

# (predicate over characters, name used in the error message)
_CHARACTER_CLASSES = (
    (str.isupper, "uppercase letter"),
    (str.islower, "lowercase letter"),
    (str.isdigit, "digit"),
)


class PasswordStrengthError(ValueError):
    """Raised when a password does not meet strength requirements."""


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """True on match, False on mismatch or an unreadable hash."""
    try:
        return _hasher.verify(password_hash, password)
    except (argon2.exceptions.VerifyMismatchError, argon2.exceptions.InvalidHashError):
        return False


def check_needs_rehash(password_hash: str) -> bool:
    return _hasher.check_needs_rehash(password_hash)


def validate_password_strength(password: str) -> None:
    """
    Raise PasswordStrengthError unless the password fits the configured
    length bounds and has at least one character of every class in
    ``_CHARACTER_CLASSES``.
    """
    if not password.strip():
        msg = "Password cannot be empty"
        raise PasswordStrengthError(msg)

    settings = get_settings()
    if len(password) < settings.password_min_length:
        msg = f"Password must be at least {settings.password_min_length} characters"
        raise PasswordStrengthError(msg)
    if len(password) > settings.password_max_length:
        msg = f"Password must not exceed {settings.password_max_length} characters"
        raise PasswordStrengthError(msg)

    for predicate, label in _CHARACTER_CLASSES:
        if not any(predicate(c) for c in password):
            msg = f"Password must contain at least one {label}"
            raise PasswordStrengthError(msg)
