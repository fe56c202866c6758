"""Pydantic models for user HTTP request and response payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from user_registry.application.ports.user_repository_port import UserRecord


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid")


class UserRegistrationRequest(StrictModel):
    """Self-service registration payload."""

    username: str
    email: str
    password: str


class PasswordResetRequest(StrictModel):
    """Password reset initiation payload."""

    email: str


class PasswordResetConfirmRequest(StrictModel):
    """Password reset completion payload."""

    token: str
    password: str


class CredentialsRequest(StrictModel):
    """Credential check payload."""

    email: str
    password: str


class CredentialsResponse(StrictModel):
    valid: bool


class OkResponse(StrictModel):
    ok: bool


class UserResponse(StrictModel):
    """Public user representation; never carries password material."""

    id: int
    username: str
    email: str
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: UserRecord) -> UserResponse:
        return cls(
            id=record.user_id,
            username=record.username,
            email=record.email,
            status=record.status.value,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
