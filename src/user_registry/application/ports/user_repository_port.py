"""Port for user persistence operations used by user services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from user_registry.domain.user_status import UserStatus


class DuplicateUserEmailError(ValueError):
    """Raised when a user is created with an email that is already registered."""

    def __init__(self, *, email: str) -> None:
        super().__init__(f"email already registered: {email}")
        self.email = email


@dataclass(frozen=True)
class UserRecord:
    """User persistence model."""

    user_id: int
    username: str
    email: str
    password_hash: str
    status: UserStatus
    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status is UserStatus.ACTIVE


@dataclass(frozen=True)
class UserCreateInput:
    """Input payload for inserting one user row."""

    username: str
    email: str
    password_hash: str
    status: UserStatus = UserStatus.ACTIVE


class UserRepositoryPort(Protocol):
    """User repository contract."""

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Persist a new user, assigning the next id; reject duplicate emails."""

    async def get_by_id(self, *, user_id: int) -> UserRecord | None:
        """Return user by id regardless of status."""

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by normalized email regardless of status."""

    async def list_by_status(self, *, status: UserStatus) -> list[UserRecord]:
        """Return users with the given status ordered by id."""

    async def list_users(self) -> list[UserRecord]:
        """Return all users ordered by id."""

    async def set_status(self, *, user_id: int, status: UserStatus) -> UserRecord | None:
        """Update status for one user and return the updated row."""

    async def set_password_hash(self, *, user_id: int, password_hash: str) -> UserRecord | None:
        """Replace stored password hash for one user and return the updated row."""

    async def delete_by_id(self, *, user_id: int) -> bool:
        """Remove one user from storage and return whether it existed."""

    async def count(self) -> int:
        """Return number of stored users."""

    async def exists_by_id(self, *, user_id: int) -> bool:
        """Return whether a user with this id exists."""

    async def exists_by_email(self, *, email: str) -> bool:
        """Return whether a user with this normalized email exists."""
