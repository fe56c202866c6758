"""FastAPI router exposing user registration and lifecycle endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, Response

from user_registry.application.dto.user_models import (
    CredentialsRequest,
    CredentialsResponse,
    OkResponse,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    UserRegistrationRequest,
    UserResponse,
)
from user_registry.application.ports.user_repository_port import DuplicateUserEmailError
from user_registry.application.services.user_registration_service import (
    InvalidResetTokenError,
    UserRegistrationService,
)
from user_registry.application.services.user_service import (
    InvalidUserEmailError,
    InvalidUsernameError,
    InvalidUserPasswordError,
    UserNotFoundError,
    UserService,
)
from user_registry.domain.user_status import UserStatus

logger = logging.getLogger(__name__)

_INVALID_INPUT_ERRORS = (
    InvalidUsernameError,
    InvalidUserEmailError,
    InvalidUserPasswordError,
)


def build_user_router(
    *,
    user_service: UserService,
    registration_service: UserRegistrationService,
) -> APIRouter:
    """Build router exposing user CRUD, registration, and password reset endpoints."""

    router = APIRouter(prefix="/api/users", tags=["users"])

    @router.post("/register", response_model=UserResponse, status_code=201)
    async def register_user(payload: UserRegistrationRequest) -> UserResponse:
        try:
            user = await registration_service.register_user(
                username=payload.username,
                email=payload.email,
                password=payload.password,
            )
        except _INVALID_INPUT_ERRORS as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except DuplicateUserEmailError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return UserResponse.from_record(user)

    @router.get("/active", response_model=list[UserResponse])
    async def get_all_active_users() -> list[UserResponse]:
        users = await user_service.find_all_active_users()
        return [UserResponse.from_record(user) for user in users]

    @router.get("/{user_id}", response_model=UserResponse)
    async def get_user_by_id(user_id: int) -> UserResponse:
        user = await user_service.find_user_by_id(user_id=user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="user not found")
        return UserResponse.from_record(user)

    @router.put("/{user_id}/status", response_model=UserResponse)
    async def update_user_status(
        user_id: int,
        status: str = Query(min_length=1),
    ) -> UserResponse:
        try:
            new_status = UserStatus.parse(status)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        try:
            user = await user_service.update_user_status(user_id=user_id, status=new_status)
        except UserNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return UserResponse.from_record(user)

    @router.delete("/{user_id}", status_code=204)
    async def delete_user(user_id: int) -> Response:
        if not await user_service.delete_user(user_id=user_id):
            raise HTTPException(status_code=404, detail="user not found")
        return Response(status_code=204)

    @router.post("/reset-password", response_model=OkResponse)
    async def reset_password(payload: PasswordResetRequest) -> OkResponse:
        try:
            initiated = await registration_service.initiate_password_reset(email=payload.email)
        except InvalidUserEmailError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if not initiated:
            raise HTTPException(status_code=404, detail="no active user for email")
        return OkResponse(ok=True)

    @router.post("/reset-password/confirm", response_model=UserResponse)
    async def confirm_password_reset(payload: PasswordResetConfirmRequest) -> UserResponse:
        try:
            user = await registration_service.complete_password_reset(
                token=payload.token,
                new_password=payload.password,
            )
        except (InvalidResetTokenError, InvalidUserPasswordError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return UserResponse.from_record(user)

    @router.post("/validate-credentials", response_model=CredentialsResponse)
    async def validate_credentials(payload: CredentialsRequest) -> CredentialsResponse:
        valid = await user_service.validate_user_credentials(
            email=payload.email,
            password=payload.password,
        )
        logger.info("credentials_checked valid=%s", valid)
        return CredentialsResponse(valid=valid)

    return router
