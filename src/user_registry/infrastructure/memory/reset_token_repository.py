"""In-process password reset token repository."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import UTC, datetime

from user_registry.application.ports.reset_token_repository_port import (
    ResetTokenCreateInput,
    ResetTokenRecord,
    ResetTokenRepositoryPort,
)


class InMemoryResetTokenRepository(ResetTokenRepositoryPort):
    """Reset token repository keyed by id with a secondary hash index."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[int, ResetTokenRecord] = {}
        self._id_by_hash: dict[str, int] = {}
        self._next_id = 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)

    async def create_token(self, payload: ResetTokenCreateInput) -> ResetTokenRecord:
        now = datetime.now(tz=UTC)
        with self._lock:
            self._prune(now)
            record = ResetTokenRecord(
                id=self._next_id,
                user_id=payload.user_id,
                token_hash=payload.token_hash,
                issued_at=now,
                expires_at=payload.expires_at,
                used_at=None,
            )
            self._next_id += 1
            self._by_id[record.id] = record
            self._id_by_hash[record.token_hash] = record.id
            return record

    async def get_active_by_hash(self, *, token_hash: str) -> ResetTokenRecord | None:
        now = datetime.now(tz=UTC)
        with self._lock:
            token_id = self._id_by_hash.get(token_hash)
            if token_id is None:
                return None
            record = self._by_id[token_id]
            if record.used_at is not None or record.expires_at <= now:
                return None
            return record

    async def mark_used(self, *, token_id: int) -> bool:
        with self._lock:
            record = self._by_id.get(token_id)
            if record is None or record.used_at is not None:
                return False
            self._by_id[token_id] = replace(record, used_at=datetime.now(tz=UTC))
            return True

    async def revoke_active_tokens_for_user(self, *, user_id: int) -> int:
        """Drop every token owned by user_id and return how many were still unused."""

        revoked = 0
        with self._lock:
            for record in list(self._by_id.values()):
                if record.user_id != user_id:
                    continue
                if record.used_at is None:
                    revoked += 1
                self._discard(record)
        return revoked

    def _prune(self, now: datetime) -> None:
        # Caller holds self._lock.
        for record in list(self._by_id.values()):
            if record.used_at is not None or record.expires_at <= now:
                self._discard(record)

    def _discard(self, record: ResetTokenRecord) -> None:
        self._by_id.pop(record.id, None)
        if self._id_by_hash.get(record.token_hash) == record.id:
            del self._id_by_hash[record.token_hash]
