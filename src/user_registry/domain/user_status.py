"""User account status enum."""

from __future__ import annotations

from enum import StrEnum


class UserStatus(StrEnum):
    """Lifecycle states a user account can be in."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"

    @classmethod
    def parse(cls, raw: str) -> UserStatus:
        """Parse status text case-insensitively, rejecting unknown values."""

        normalized = raw.strip().lower()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"unknown user status: {raw!r}") from exc
