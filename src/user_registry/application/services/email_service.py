"""Application service that renders and dispatches user notification emails."""

from __future__ import annotations

import logging

from user_registry.application.ports.email_sender_port import EmailSenderPort
from user_registry.application.ports.user_repository_port import UserRecord
from user_registry.domain.credentials import is_blank, is_valid_email
from user_registry.infrastructure.email.templates import (
    build_password_reset_email,
    build_welcome_email,
)

logger = logging.getLogger(__name__)


class InvalidEmailRecipientError(ValueError):
    """Raised when an email cannot be addressed to the given user."""

    def __init__(self) -> None:
        super().__init__("invalid user or email")


class EmptyResetTokenError(ValueError):
    """Raised when a password reset email is requested without a token."""

    def __init__(self) -> None:
        super().__init__("reset token cannot be empty")


class EmailService:
    """Send welcome and password reset emails through the configured sender."""

    def __init__(
        self,
        *,
        sender: EmailSenderPort,
        reset_token_ttl_minutes: int = 60,
    ) -> None:
        self._sender = sender
        self._reset_token_ttl_minutes = reset_token_ttl_minutes

    async def send_welcome_email(self, user: UserRecord | None) -> None:
        recipient = _require_recipient(user)
        await self._sender.send(
            build_welcome_email(to=recipient.email, username=recipient.username)
        )
        logger.info("welcome_email_sent user_id=%s", recipient.user_id)

    async def send_password_reset_email(self, user: UserRecord | None, reset_token: str) -> None:
        recipient = _require_recipient(user)
        if is_blank(reset_token):
            raise EmptyResetTokenError()

        await self._sender.send(
            build_password_reset_email(
                to=recipient.email,
                username=recipient.username,
                reset_token=reset_token,
                ttl_minutes=self._reset_token_ttl_minutes,
            )
        )
        logger.info("password_reset_email_sent user_id=%s", recipient.user_id)


def _require_recipient(user: UserRecord | None) -> UserRecord:
    if user is None or not is_valid_email(user.email):
        raise InvalidEmailRecipientError()
    return user
