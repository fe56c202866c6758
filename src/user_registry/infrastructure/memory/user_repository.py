"""In-process user repository with id and email indexes."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import UTC, datetime

from user_registry.application.ports.user_repository_port import (
    DuplicateUserEmailError,
    UserCreateInput,
    UserRecord,
    UserRepositoryPort,
)
from user_registry.domain.user_status import UserStatus


class InMemoryUserRepository(UserRepositoryPort):
    """User repository backed by two dicts guarded by one lock.

    `_by_id` and `_by_email` always reference the same records; every
    mutation updates both while holding `_lock`.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[int, UserRecord] = {}
        self._by_email: dict[str, UserRecord] = {}
        self._next_id = 1

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        now = datetime.now(tz=UTC)
        with self._lock:
            if payload.email in self._by_email:
                raise DuplicateUserEmailError(email=payload.email)

            user = UserRecord(
                user_id=self._next_id,
                username=payload.username,
                email=payload.email,
                password_hash=payload.password_hash,
                status=payload.status,
                created_at=now,
                updated_at=now,
            )
            self._next_id += 1
            self._by_id[user.user_id] = user
            self._by_email[user.email] = user
            return user

    async def get_by_id(self, *, user_id: int) -> UserRecord | None:
        with self._lock:
            return self._by_id.get(user_id)

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        with self._lock:
            return self._by_email.get(email)

    async def list_by_status(self, *, status: UserStatus) -> list[UserRecord]:
        with self._lock:
            return [
                user
                for _, user in sorted(self._by_id.items())
                if user.status is status
            ]

    async def list_users(self) -> list[UserRecord]:
        with self._lock:
            return [user for _, user in sorted(self._by_id.items())]

    async def set_status(self, *, user_id: int, status: UserStatus) -> UserRecord | None:
        with self._lock:
            existing = self._by_id.get(user_id)
            if existing is None:
                return None
            return self._replace(existing, status=status)

    async def set_password_hash(self, *, user_id: int, password_hash: str) -> UserRecord | None:
        with self._lock:
            existing = self._by_id.get(user_id)
            if existing is None:
                return None
            return self._replace(existing, password_hash=password_hash)

    async def delete_by_id(self, *, user_id: int) -> bool:
        with self._lock:
            existing = self._by_id.pop(user_id, None)
            if existing is None:
                return False
            self._by_email.pop(existing.email, None)
            return True

    async def count(self) -> int:
        with self._lock:
            return len(self._by_id)

    async def exists_by_id(self, *, user_id: int) -> bool:
        with self._lock:
            return user_id in self._by_id

    async def exists_by_email(self, *, email: str) -> bool:
        with self._lock:
            return email in self._by_email

    def _replace(self, existing: UserRecord, **changes: object) -> UserRecord:
        # Caller holds self._lock.
        updated = replace(existing, updated_at=datetime.now(tz=UTC), **changes)  # type: ignore[arg-type]
        if updated.email != existing.email:
            self._by_email.pop(existing.email, None)
        self._by_id[updated.user_id] = updated
        self._by_email[updated.email] = updated
        return updated
