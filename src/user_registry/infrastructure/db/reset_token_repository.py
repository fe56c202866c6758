"""SQLAlchemy adapter for password reset token persistence."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, cast

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from user_registry.application.ports.reset_token_repository_port import (
    ResetTokenCreateInput,
    ResetTokenRecord,
    ResetTokenRepositoryPort,
)
from user_registry.infrastructure.db.metadata import password_reset_tokens
from user_registry.infrastructure.db.user_repository import as_utc


class SqlAlchemyResetTokenRepository(ResetTokenRepositoryPort):
    """Reset token repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_token(self, payload: ResetTokenCreateInput) -> ResetTokenRecord:
        """Persist a token hash row and return the inserted token record."""

        statement = sa.insert(password_reset_tokens).values(
            user_id=payload.user_id,
            token_hash=payload.token_hash,
            expires_at=payload.expires_at,
        ).returning(*password_reset_tokens.c)

        async with self._session_factory() as session:
            result = await session.execute(statement)
            await session.commit()

        return _to_reset_token_record(result.mappings().one())

    async def get_active_by_hash(self, *, token_hash: str) -> ResetTokenRecord | None:
        """Return token by hash when not used and not expired."""

        now = datetime.now(tz=UTC)
        statement = sa.select(*password_reset_tokens.c).where(
            password_reset_tokens.c.token_hash == token_hash,
            password_reset_tokens.c.used_at.is_(None),
            password_reset_tokens.c.expires_at > now,
        ).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_reset_token_record(row)

    async def mark_used(self, *, token_id: int) -> bool:
        """Consume one token; the `used_at IS NULL` guard makes reuse a no-op."""

        statement = (
            sa.update(password_reset_tokens)
            .where(
                password_reset_tokens.c.id == token_id,
                password_reset_tokens.c.used_at.is_(None),
            )
            .values(used_at=sa.text("CURRENT_TIMESTAMP"))
        )

        async with self._session_factory() as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        return int(result.rowcount or 0) == 1

    async def revoke_active_tokens_for_user(self, *, user_id: int) -> int:
        """Consume all currently unused tokens for one user."""

        statement = (
            sa.update(password_reset_tokens)
            .where(
                password_reset_tokens.c.user_id == user_id,
                password_reset_tokens.c.used_at.is_(None),
            )
            .values(used_at=sa.text("CURRENT_TIMESTAMP"))
        )

        async with self._session_factory() as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        return int(result.rowcount or 0)


def _to_reset_token_record(row: sa.RowMapping) -> ResetTokenRecord:
    return ResetTokenRecord(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        token_hash=cast(str, row["token_hash"]),
        issued_at=as_utc(cast(datetime, row["issued_at"])),
        expires_at=as_utc(cast(datetime, row["expires_at"])),
        used_at=None if row["used_at"] is None else as_utc(cast(datetime, row["used_at"])),
    )
