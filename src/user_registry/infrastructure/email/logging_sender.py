"""Email sender that records messages in the process log instead of delivering them."""

from __future__ import annotations

import logging

from user_registry.application.ports.email_sender_port import EmailMessage, EmailSenderPort

logger = logging.getLogger(__name__)


class LoggingEmailSender(EmailSenderPort):
    """Stub sender for environments without an outbound mail relay."""

    def __init__(self, *, sender_address: str = "no-reply@example.org") -> None:
        self._sender_address = sender_address
        self.outbox: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> None:
        self.outbox.append(message)
        logger.info(
            "email_sent from=%s to=%s subject=%r",
            self._sender_address,
            message.to,
            message.subject,
        )
        logger.debug("email_body to=%s body=%r", message.to, message.body)
