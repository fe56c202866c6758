"""SQLAlchemy adapter for user persistence."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, cast

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from user_registry.application.ports.user_repository_port import (
    DuplicateUserEmailError,
    UserCreateInput,
    UserRecord,
    UserRepositoryPort,
)
from user_registry.domain.user_status import UserStatus
from user_registry.infrastructure.db.metadata import password_reset_tokens, users

_EMAIL_CONSTRAINT_MARKERS = ("uq_users_email", "users.email")


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one user row and return the persisted record."""

        statement = sa.insert(users).values(
            username=payload.username,
            email=payload.email,
            password_hash=payload.password_hash,
            status=payload.status.value,
        ).returning(*users.c)

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                if not _is_email_conflict(exc):
                    raise
                raise DuplicateUserEmailError(email=payload.email) from exc

        return _to_user_record(result.mappings().one())

    async def get_by_id(self, *, user_id: int) -> UserRecord | None:
        return await self._fetch_one(users.c.id == user_id)

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        return await self._fetch_one(users.c.email == email)

    async def list_by_status(self, *, status: UserStatus) -> list[UserRecord]:
        statement = sa.select(*users.c).where(users.c.status == status.value).order_by(users.c.id)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_user_record(row) for row in result.mappings().all()]

    async def list_users(self) -> list[UserRecord]:
        statement = sa.select(*users.c).order_by(users.c.id)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_user_record(row) for row in result.mappings().all()]

    async def set_status(self, *, user_id: int, status: UserStatus) -> UserRecord | None:
        return await self._update_one(user_id=user_id, status=status.value)

    async def set_password_hash(self, *, user_id: int, password_hash: str) -> UserRecord | None:
        return await self._update_one(user_id=user_id, password_hash=password_hash)

    async def delete_by_id(self, *, user_id: int) -> bool:
        """Delete one user together with the reset tokens that reference it."""

        async with self._session_factory() as session:
            await session.execute(
                sa.delete(password_reset_tokens).where(password_reset_tokens.c.user_id == user_id)
            )
            result = cast(
                CursorResult[Any],
                await session.execute(sa.delete(users).where(users.c.id == user_id)),
            )
            await session.commit()

        return int(result.rowcount or 0) > 0

    async def count(self) -> int:
        statement = sa.select(sa.func.count()).select_from(users)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return int(result.scalar_one())

    async def exists_by_id(self, *, user_id: int) -> bool:
        return await self.get_by_id(user_id=user_id) is not None

    async def exists_by_email(self, *, email: str) -> bool:
        return await self.get_by_email(email=email) is not None

    async def _fetch_one(self, condition: sa.ColumnElement[bool]) -> UserRecord | None:
        statement = sa.select(*users.c).where(condition).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def _update_one(self, *, user_id: int, **values: object) -> UserRecord | None:
        statement = (
            sa.update(users)
            .where(users.c.id == user_id)
            .values(updated_at=sa.func.current_timestamp(), **values)
            .returning(*users.c)
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)
            row = result.mappings().first()
            await session.commit()

        if row is None:
            return None
        return _to_user_record(row)


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    return UserRecord(
        user_id=int(row["id"]),
        username=cast(str, row["username"]),
        email=cast(str, row["email"]),
        password_hash=cast(str, row["password_hash"]),
        status=UserStatus(cast(str, row["status"])),
        created_at=as_utc(cast(datetime, row["created_at"])),
        updated_at=as_utc(cast(datetime, row["updated_at"])),
    )


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps returned by drivers such as SQLite."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _is_email_conflict(error: IntegrityError) -> bool:
    message = str(error.orig)
    return any(marker in message for marker in _EMAIL_CONSTRAINT_MARKERS)
