"""Plain-text templates for user notification emails."""

from __future__ import annotations

from user_registry.application.ports.email_sender_port import EmailMessage
from user_registry.domain.credentials import capitalize

_SIGNATURE = "Best regards,\nThe Team"


def build_welcome_email(*, to: str, username: str) -> EmailMessage:
    """Build welcome email sent right after registration."""

    display_name = capitalize(username)
    return EmailMessage(
        to=to,
        subject=f"Welcome to our platform, {display_name}",
        body=(
            f"Dear {display_name},\n\n"
            "Welcome to our platform! Your account has been successfully created.\n\n"
            f"{_SIGNATURE}"
        ),
    )


def build_password_reset_email(
    *,
    to: str,
    username: str,
    reset_token: str,
    ttl_minutes: int = 60,
) -> EmailMessage:
    """Build password reset email carrying the plaintext reset token."""

    return EmailMessage(
        to=to,
        subject="Password Reset Request",
        body=(
            f"Dear {capitalize(username)},\n\n"
            "You have requested a password reset. "
            f"Please use the following token: {reset_token}\n\n"
            f"This token will expire in {_format_ttl(ttl_minutes)}.\n\n"
            f"{_SIGNATURE}"
        ),
    )


def _format_ttl(ttl_minutes: int) -> str:
    if ttl_minutes % 60 == 0:
        hours = ttl_minutes // 60
        return "1 hour" if hours == 1 else f"{hours} hours"
    return "1 minute" if ttl_minutes == 1 else f"{ttl_minutes} minutes"
