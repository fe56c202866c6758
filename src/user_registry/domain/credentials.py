"""Shared normalization helpers for user credential inputs."""

from __future__ import annotations

import re

_EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")


def is_blank(value: str | None) -> bool:
    """Return whether value is missing or whitespace-only."""

    return value is None or not value.strip()


def is_valid_email(email: str | None) -> bool:
    """Return whether email has a local part, an `@`, and a domain part."""

    if is_blank(email):
        return False
    assert email is not None
    return _EMAIL_PATTERN.match(email.strip()) is not None


def normalize_user_email(*, email: str) -> str:
    """Normalize one user email and reject blank or malformed values."""

    normalized = email.strip().lower()
    if not normalized:
        raise ValueError("email cannot be blank")
    if not is_valid_email(normalized):
        raise ValueError("invalid email format")
    return normalized


def normalize_username(*, username: str) -> str:
    """Normalize one username and reject blank values."""

    normalized = username.strip()
    if not normalized:
        raise ValueError("username cannot be blank")
    return normalized


def normalize_user_password(*, password: str) -> str:
    """Reject blank passwords; surrounding whitespace is part of the secret."""

    if not password.strip():
        raise ValueError("password cannot be blank")
    return password


def capitalize(value: str) -> str:
    """Upper-case the first character and lower-case the rest."""

    if is_blank(value):
        return value
    return value[:1].upper() + value[1:].lower()
