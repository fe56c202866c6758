"""user-api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

import uvicorn
from fastapi import FastAPI

from user_registry.application.ports.email_sender_port import EmailSenderPort
from user_registry.application.ports.reset_token_repository_port import ResetTokenRepositoryPort
from user_registry.application.ports.user_repository_port import UserRepositoryPort
from user_registry.application.services.email_service import EmailService
from user_registry.application.services.user_registration_service import (
    UserRegistrationService,
)
from user_registry.application.services.user_service import UserService
from user_registry.config.settings import Settings, load_settings
from user_registry.infrastructure.db.reset_token_repository import (
    SqlAlchemyResetTokenRepository,
)
from user_registry.infrastructure.db.session import create_session_factory
from user_registry.infrastructure.db.user_repository import SqlAlchemyUserRepository
from user_registry.infrastructure.email.logging_sender import LoggingEmailSender
from user_registry.infrastructure.http.user_router import build_user_router
from user_registry.infrastructure.logging import configure_logging
from user_registry.infrastructure.memory.reset_token_repository import (
    InMemoryResetTokenRepository,
)
from user_registry.infrastructure.memory.user_repository import InMemoryUserRepository
from user_registry.infrastructure.security.password_hasher import BcryptPasswordHasher

USER_API_HOST = "0.0.0.0"
USER_API_PORT = 8000
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserServices:
    """Service graph shared by the HTTP routes."""

    user_service: UserService
    registration_service: UserRegistrationService


def build_repositories(
    database_url: str | None,
) -> tuple[UserRepositoryPort, ResetTokenRepositoryPort]:
    """Build SQLAlchemy-backed repositories, or in-memory ones when no URL is set."""

    if database_url is None:
        return InMemoryUserRepository(), InMemoryResetTokenRepository()

    session_factory = create_session_factory(database_url)
    return (
        SqlAlchemyUserRepository(session_factory),
        SqlAlchemyResetTokenRepository(session_factory),
    )


def build_user_services(
    *,
    users: UserRepositoryPort,
    reset_tokens: ResetTokenRepositoryPort,
    email_sender: EmailSenderPort,
    reset_token_ttl_minutes: int = 60,
    password_hasher: BcryptPasswordHasher | None = None,
) -> UserServices:
    """Wire user, email, and registration services over the given adapters."""

    user_service = UserService(
        users=users,
        password_hasher=password_hasher or BcryptPasswordHasher(),
    )
    email_service = EmailService(
        sender=email_sender,
        reset_token_ttl_minutes=reset_token_ttl_minutes,
    )
    registration_service = UserRegistrationService(
        user_service=user_service,
        email_service=email_service,
        reset_tokens=reset_tokens,
        reset_token_ttl=timedelta(minutes=reset_token_ttl_minutes),
    )
    return UserServices(
        user_service=user_service,
        registration_service=registration_service,
    )


def build_services_from_settings(settings: Settings) -> UserServices:
    """Build the runtime service graph from environment settings."""

    users, reset_tokens = build_repositories(settings.database_url)
    logger.info(
        "user_api_storage_selected backend=%s",
        "memory" if settings.database_url is None else "sqlalchemy",
    )
    return build_user_services(
        users=users,
        reset_tokens=reset_tokens,
        email_sender=LoggingEmailSender(sender_address=settings.email_sender_address),
        reset_token_ttl_minutes=settings.password_reset_token_ttl_minutes,
    )


def create_app(*, services: UserServices | None = None) -> FastAPI:
    """Create FastAPI app exposing the user registry routes."""

    if services is None:
        settings = load_settings()
        configure_logging(level=settings.log_level)
        services = build_services_from_settings(settings)

    app = FastAPI(title="user-registry")
    app.include_router(
        build_user_router(
            user_service=services.user_service,
            registration_service=services.registration_service,
        )
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


def run_asgi_server(*, host: str = USER_API_HOST, port: int = USER_API_PORT) -> None:
    """Run user-api as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.user_api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run user-api runtime process."""

    settings = load_settings()
    run_asgi_server(host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
