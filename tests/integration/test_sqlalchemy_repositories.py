from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest
from alembic.config import Config
from sqlalchemy.exc import IntegrityError

from alembic import command
from user_registry.application.ports.reset_token_repository_port import ResetTokenCreateInput
from user_registry.application.ports.user_repository_port import (
    DuplicateUserEmailError,
    UserCreateInput,
)
from user_registry.domain.user_status import UserStatus
from user_registry.infrastructure.db.reset_token_repository import (
    SqlAlchemyResetTokenRepository,
)
from user_registry.infrastructure.db.session import create_session_factory
from user_registry.infrastructure.db.user_repository import SqlAlchemyUserRepository


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")

    return sync_url, async_url


def _payload(email: str, *, username: str = "gina") -> UserCreateInput:
    return UserCreateInput(username=username, email=email, password_hash="hash")


@pytest.mark.asyncio
async def test_user_repository_creates_and_looks_up_users(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_repo_lookup.db")
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))

    first = await repo.create_user(_payload("g@example.org"))
    second = await repo.create_user(_payload("h@example.org", username="hank"))

    assert (first.user_id, second.user_id) == (1, 2)
    assert first.status is UserStatus.ACTIVE
    assert await repo.get_by_id(user_id=first.user_id) == first
    assert (await repo.get_by_email(email="h@example.org")) == second
    assert await repo.get_by_id(user_id=99) is None
    assert await repo.count() == 2
    assert await repo.exists_by_email(email="g@example.org") is True
    assert await repo.exists_by_id(user_id=3) is False


@pytest.mark.asyncio
async def test_user_repository_rejects_duplicate_email(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_repo_duplicate.db")
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))
    await repo.create_user(_payload("g@example.org"))

    with pytest.raises(DuplicateUserEmailError):
        await repo.create_user(_payload("g@example.org", username="other"))

    assert await repo.count() == 1


@pytest.mark.asyncio
async def test_user_repository_updates_lists_and_deletes(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_repo_updates.db")
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))
    for index in range(3):
        await repo.create_user(_payload(f"user{index}@example.org"))

    suspended = await repo.set_status(user_id=2, status=UserStatus.SUSPENDED)
    rehashed = await repo.set_password_hash(user_id=3, password_hash="new-hash")

    assert suspended is not None
    assert suspended.status is UserStatus.SUSPENDED
    assert rehashed is not None
    assert rehashed.password_hash == "new-hash"
    assert await repo.set_status(user_id=99, status=UserStatus.ACTIVE) is None
    assert [u.user_id for u in await repo.list_by_status(status=UserStatus.ACTIVE)] == [1, 3]
    assert [u.user_id for u in await repo.list_users()] == [1, 2, 3]

    assert await repo.delete_by_id(user_id=1) is True
    assert await repo.delete_by_id(user_id=1) is False
    assert await repo.exists_by_email(email="user0@example.org") is False


@pytest.mark.asyncio
async def test_reset_token_repository_tracks_active_tokens(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "reset_token_repo.db")
    session_factory = create_session_factory(async_url)
    users = SqlAlchemyUserRepository(session_factory)
    tokens = SqlAlchemyResetTokenRepository(session_factory)
    owner = await users.create_user(_payload("g@example.org"))
    expires_at = datetime.now(tz=UTC) + timedelta(hours=1)

    first = await tokens.create_token(
        ResetTokenCreateInput(user_id=owner.user_id, token_hash="a", expires_at=expires_at)
    )
    await tokens.create_token(
        ResetTokenCreateInput(user_id=owner.user_id, token_hash="b", expires_at=expires_at)
    )
    await tokens.create_token(
        ResetTokenCreateInput(
            user_id=owner.user_id,
            token_hash="expired",
            expires_at=datetime.now(tz=UTC) - timedelta(minutes=1),
        )
    )

    found = await tokens.get_active_by_hash(token_hash="a")
    assert found is not None
    assert found.id == first.id
    assert await tokens.get_active_by_hash(token_hash="expired") is None

    assert await tokens.mark_used(token_id=first.id) is True
    assert await tokens.mark_used(token_id=first.id) is False
    assert await tokens.get_active_by_hash(token_hash="a") is None

    assert await tokens.revoke_active_tokens_for_user(user_id=owner.user_id) == 2
    assert await tokens.get_active_by_hash(token_hash="b") is None


@pytest.mark.asyncio
async def test_user_repository_reraises_non_email_integrity_errors(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_repo_check_violation.db")
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))
    invalid_status = SimpleNamespace(value="deleted")

    with pytest.raises(IntegrityError) as exc_info:
        await repo.create_user(
            UserCreateInput(
                username="gina",
                email="g@example.org",
                password_hash="hash",
                status=invalid_status,  # type: ignore[arg-type]
            )
        )

    assert not isinstance(exc_info.value, DuplicateUserEmailError)
    assert await repo.count() == 0


@pytest.mark.asyncio
async def test_user_repository_delete_removes_referencing_reset_tokens(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_repo_delete_tokens.db")
    session_factory = create_session_factory(async_url)
    users = SqlAlchemyUserRepository(session_factory)
    tokens = SqlAlchemyResetTokenRepository(session_factory)
    owner = await users.create_user(_payload("g@example.org"))
    other = await users.create_user(_payload("h@example.org", username="hank"))
    expires_at = datetime.now(tz=UTC) + timedelta(hours=1)
    await tokens.create_token(
        ResetTokenCreateInput(user_id=owner.user_id, token_hash="owned", expires_at=expires_at)
    )
    await tokens.create_token(
        ResetTokenCreateInput(user_id=other.user_id, token_hash="kept", expires_at=expires_at)
    )

    assert await users.delete_by_id(user_id=owner.user_id) is True

    assert await tokens.get_active_by_hash(token_hash="owned") is None
    assert await tokens.get_active_by_hash(token_hash="kept") is not None


@pytest.mark.asyncio
async def test_repositories_return_utc_aware_timestamps(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "repo_utc_timestamps.db")
    session_factory = create_session_factory(async_url)
    users = SqlAlchemyUserRepository(session_factory)
    tokens = SqlAlchemyResetTokenRepository(session_factory)

    created = await users.create_user(_payload("g@example.org"))
    updated = await users.set_status(user_id=created.user_id, status=UserStatus.INACTIVE)
    token = await tokens.create_token(
        ResetTokenCreateInput(
            user_id=created.user_id,
            token_hash="a",
            expires_at=datetime.now(tz=UTC) + timedelta(hours=1),
        )
    )

    assert updated is not None
    assert created.created_at.tzinfo is not None
    assert created.created_at.utcoffset() == timedelta(0)
    assert updated.updated_at.utcoffset() == timedelta(0)
    assert token.issued_at.utcoffset() == timedelta(0)
    assert token.expires_at.utcoffset() == timedelta(0)
