"""Application service for user lifecycle operations."""

from __future__ import annotations

import logging

from user_registry.application.ports.password_hasher_port import PasswordHasherPort
from user_registry.application.ports.user_repository_port import (
    UserCreateInput,
    UserRecord,
    UserRepositoryPort,
)
from user_registry.domain.credentials import (
    normalize_user_email,
    normalize_user_password,
    normalize_username,
)
from user_registry.domain.user_status import UserStatus

logger = logging.getLogger(__name__)


class UserNotFoundError(LookupError):
    """Raised when a target user cannot be found for one lifecycle action."""

    def __init__(self, *, user_id: int) -> None:
        super().__init__(f"user not found: {user_id}")
        self.user_id = user_id


class InvalidUsernameError(ValueError):
    """Raised when a username is blank."""


class InvalidUserEmailError(ValueError):
    """Raised when an email is blank or malformed."""


class InvalidUserPasswordError(ValueError):
    """Raised when a password is blank."""


class UserService:
    """Create, look up, and transition user accounts."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher

    async def create_user(self, *, username: str, email: str, password: str) -> UserRecord:
        """Validate inputs, hash password, and persist one active user."""

        try:
            normalized_username = normalize_username(username=username)
        except ValueError as exc:
            raise InvalidUsernameError(str(exc)) from exc
        try:
            normalized_email = normalize_user_email(email=email)
        except ValueError as exc:
            raise InvalidUserEmailError(str(exc)) from exc
        try:
            normalized_password = normalize_user_password(password=password)
        except ValueError as exc:
            raise InvalidUserPasswordError(str(exc)) from exc

        created = await self._users.create_user(
            UserCreateInput(
                username=normalized_username,
                email=normalized_email,
                password_hash=self._password_hasher.hash_password(normalized_password),
                status=UserStatus.ACTIVE,
            )
        )
        logger.info("user_created user_id=%s email=%s", created.user_id, created.email)
        return created

    async def find_user_by_id(self, *, user_id: int) -> UserRecord | None:
        return await self._users.get_by_id(user_id=user_id)

    async def find_all_active_users(self) -> list[UserRecord]:
        return await self._users.list_by_status(status=UserStatus.ACTIVE)

    async def update_user_status(self, *, user_id: int, status: UserStatus) -> UserRecord:
        """Transition one user to the requested status."""

        updated = await self._users.set_status(user_id=user_id, status=status)
        if updated is None:
            raise UserNotFoundError(user_id=user_id)
        logger.info("user_status_updated user_id=%s status=%s", user_id, status.value)
        return updated

    async def delete_user(self, *, user_id: int) -> bool:
        """Soft-delete one user by marking it inactive; False when unknown."""

        updated = await self._users.set_status(user_id=user_id, status=UserStatus.INACTIVE)
        if updated is None:
            return False
        logger.info("user_deactivated user_id=%s", user_id)
        return True

    async def validate_user_credentials(self, *, email: str, password: str) -> bool:
        """Return True only for an existing active user whose password verifies."""

        try:
            normalized_email = normalize_user_email(email=email)
        except ValueError:
            return False

        user = await self._users.get_by_email(email=normalized_email)
        if user is None or not user.is_active:
            return False
        return self._password_hasher.verify_password(
            password=password,
            password_hash=user.password_hash,
        )

    async def change_password(self, *, user_id: int, password: str) -> UserRecord:
        """Hash and store a new password for one user."""

        try:
            normalized_password = normalize_user_password(password=password)
        except ValueError as exc:
            raise InvalidUserPasswordError(str(exc)) from exc

        updated = await self._users.set_password_hash(
            user_id=user_id,
            password_hash=self._password_hasher.hash_password(normalized_password),
        )
        if updated is None:
            raise UserNotFoundError(user_id=user_id)
        logger.info("user_password_changed user_id=%s", user_id)
        return updated
