"""Port for password reset token persistence operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class ResetTokenCreateInput:
    """Input payload for inserting a password reset token record."""

    user_id: int
    token_hash: str
    expires_at: datetime


@dataclass(frozen=True)
class ResetTokenRecord:
    """Persisted password reset token model."""

    id: int
    user_id: int
    token_hash: str
    issued_at: datetime
    expires_at: datetime
    used_at: datetime | None


class ResetTokenRepositoryPort(Protocol):
    """Password reset token persistence contract."""

    async def create_token(self, payload: ResetTokenCreateInput) -> ResetTokenRecord:
        """Persist a new reset token record."""

    async def get_active_by_hash(self, *, token_hash: str) -> ResetTokenRecord | None:
        """Return token record by hash when not used and not expired."""

    async def mark_used(self, *, token_id: int) -> bool:
        """Mark one token as consumed and return whether it was still unused."""

    async def revoke_active_tokens_for_user(self, *, user_id: int) -> int:
        """Mark every unused token for one user as consumed and return affected count."""
