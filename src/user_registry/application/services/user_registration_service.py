"""Application service for self-service registration and password reset."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from user_registry.application.ports.reset_token_repository_port import (
    ResetTokenCreateInput,
    ResetTokenRepositoryPort,
)
from user_registry.application.ports.user_repository_port import UserRecord
from user_registry.application.services.email_service import EmailService
from user_registry.application.services.user_service import (
    InvalidUserEmailError,
    InvalidUsernameError,
    InvalidUserPasswordError,
    UserService,
)
from user_registry.domain.credentials import is_blank, is_valid_email
from user_registry.infrastructure.security.reset_token_service import ResetTokenService

logger = logging.getLogger(__name__)

DEFAULT_RESET_TOKEN_TTL = timedelta(hours=1)


class InvalidResetTokenError(ValueError):
    """Raised when a reset token is unknown, consumed, expired, or owned by an inactive user."""

    def __init__(self) -> None:
        super().__init__("invalid or expired reset token")


class UserRegistrationService:
    """Orchestrate user registration, welcome email, and password reset flows."""

    def __init__(
        self,
        *,
        user_service: UserService,
        email_service: EmailService,
        reset_tokens: ResetTokenRepositoryPort,
        token_service: ResetTokenService | None = None,
        reset_token_ttl: timedelta = DEFAULT_RESET_TOKEN_TTL,
    ) -> None:
        self._user_service = user_service
        self._email_service = email_service
        self._reset_tokens = reset_tokens
        self._token_service = token_service or ResetTokenService()
        self._reset_token_ttl = reset_token_ttl

    async def register_user(self, *, username: str, email: str, password: str) -> UserRecord:
        """Validate registration input, create the user, and send a welcome email."""

        if is_blank(username):
            raise InvalidUsernameError("username is required")
        if not is_valid_email(email):
            raise InvalidUserEmailError("invalid email format")
        if is_blank(password):
            raise InvalidUserPasswordError("password is required")

        user = await self._user_service.create_user(
            username=username,
            email=email,
            password=password,
        )
        await self._email_service.send_welcome_email(user)
        return user

    async def initiate_password_reset(self, *, email: str) -> bool:
        """Send a reset token to the active user owning email; False when none matches."""

        if not is_valid_email(email):
            raise InvalidUserEmailError("invalid email format")

        normalized_email = email.strip().lower()
        for user in await self._user_service.find_all_active_users():
            if user.email != normalized_email:
                continue

            reset_token = self._token_service.generate_token()
            await self._reset_tokens.create_token(
                ResetTokenCreateInput(
                    user_id=user.user_id,
                    token_hash=self._token_service.hash_token(reset_token),
                    expires_at=datetime.now(tz=UTC) + self._reset_token_ttl,
                )
            )
            await self._email_service.send_password_reset_email(user, reset_token)
            logger.info("password_reset_initiated user_id=%s", user.user_id)
            return True

        logger.info("password_reset_no_active_user email=%s", normalized_email)
        return False

    async def complete_password_reset(self, *, token: str, new_password: str) -> UserRecord:
        """Consume a reset token and store the new password for its owner."""

        if is_blank(token):
            raise InvalidResetTokenError()
        if is_blank(new_password):
            raise InvalidUserPasswordError("password is required")

        record = await self._reset_tokens.get_active_by_hash(
            token_hash=self._token_service.hash_token(token.strip())
        )
        if record is None:
            raise InvalidResetTokenError()

        owner = await self._user_service.find_user_by_id(user_id=record.user_id)
        if owner is None or not owner.is_active:
            raise InvalidResetTokenError()

        if not await self._reset_tokens.mark_used(token_id=record.id):
            raise InvalidResetTokenError()

        updated = await self._user_service.change_password(
            user_id=owner.user_id,
            password=new_password,
        )
        await self._reset_tokens.revoke_active_tokens_for_user(user_id=owner.user_id)
        logger.info("password_reset_completed user_id=%s", owner.user_id)
        return updated
