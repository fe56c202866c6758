"""Port for outbound email delivery."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class EmailMessage:
    """Rendered email ready for delivery."""

    to: str
    subject: str
    body: str


class EmailSenderPort(Protocol):
    """Email delivery contract."""

    async def send(self, message: EmailMessage) -> None:
        """Deliver one rendered email message."""
