"""Authentication API Router.

This module provides the credential and session endpoints: registration,
email verification, login, refresh-token rotation, logout and password
management.

The refresh token is returned in the response body and also set as an
httpOnly cookie, so browser clients never have to handle it in script.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Cookie, Response, status

from account_service.api.deps import (  # noqa: TC001 - Needed at runtime for FastAPI DI
    CurrentUser,
    DBSession,
)
from account_service.core.config import settings
from account_service.schemas.auth import (
    ActionTokenResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenResponse,
)
from account_service.schemas.base import MessageResponse
from account_service.schemas.user import UserCreate, UserResponse
from account_service.services.auth_service import AuthService, SessionTokens

router = APIRouter()


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.REFRESH_COOKIE_SECURE,
        samesite="strict",
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        httponly=True,
        secure=settings.REFRESH_COOKIE_SECURE,
        samesite="strict",
    )


def _token_response(response: Response, tokens: SessionTokens) -> TokenResponse:
    _set_refresh_cookie(response, tokens.refresh_token)
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
        user=UserResponse.model_validate(tokens.user),
    )


def _debug_only(token: str | None) -> str | None:
    # Tokens travel by email in production; DEBUG exposes them for local testing
    return token if settings.DEBUG else None


# =============================================================================
# Registration and verification
# =============================================================================


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account pending email verification.",
)
async def register(db: DBSession, user_in: UserCreate) -> RegisterResponse:
    result = await AuthService(db).register(
        name=user_in.name,
        email=user_in.email,
        password=user_in.password,
    )
    return RegisterResponse(
        user=UserResponse.model_validate(result.user),
        message="Registration successful. Please verify your email.",
        verification_token=_debug_only(result.verification_token),
    )


@router.get(
    "/verify-email/{token}",
    response_model=MessageResponse,
    summary="Verify email",
)
async def verify_email(db: DBSession, token: str) -> MessageResponse:
    await AuthService(db).verify_email(token)
    return MessageResponse(message="Email verified successfully")


@router.post(
    "/resend-verification",
    response_model=ActionTokenResponse,
    summary="Resend verification email",
)
async def resend_verification(
    db: DBSession, current_user: CurrentUser
) -> ActionTokenResponse:
    token = await AuthService(db).resend_verification(current_user)
    return ActionTokenResponse(
        message="Verification email sent",
        token=_debug_only(token),
    )


# =============================================================================
# Sessions
# =============================================================================


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login",
    description="Authenticate with email and password.",
)
async def login(
    db: DBSession, credentials: LoginRequest, response: Response
) -> TokenResponse:
    tokens = await AuthService(db).login(credentials.email, credentials.password)
    return _token_response(response, tokens)


@router.post(
    "/refresh-token",
    response_model=TokenResponse,
    summary="Refresh session",
    description="Rotate the refresh token. Reads it from the body or the refresh cookie.",
)
async def refresh_token(
    db: DBSession,
    response: Response,
    payload: RefreshRequest | None = None,
    refresh_cookie: Annotated[
        str | None, Cookie(alias=settings.REFRESH_COOKIE_NAME)
    ] = None,
) -> TokenResponse:
    token = (payload.refresh_token if payload else None) or refresh_cookie or ""
    tokens = await AuthService(db).refresh_session(token)
    return _token_response(response, tokens)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
)
async def logout(
    db: DBSession, current_user: CurrentUser, response: Response
) -> MessageResponse:
    await AuthService(db).logout(current_user.id)
    _clear_refresh_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse, summary="Current user")
async def me(current_user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(current_user)


# =============================================================================
# Passwords
# =============================================================================


@router.post(
    "/forgot-password",
    response_model=ActionTokenResponse,
    summary="Request password reset",
    description="Always reports success so the response cannot reveal which emails exist.",
)
async def forgot_password(
    db: DBSession, payload: ForgotPasswordRequest
) -> ActionTokenResponse:
    token = await AuthService(db).request_password_reset(payload.email)
    return ActionTokenResponse(
        message="If an account exists for this email, a reset link has been sent",
        token=_debug_only(token),
    )


@router.post(
    "/reset-password/{token}",
    response_model=MessageResponse,
    summary="Reset password",
)
async def reset_password(
    db: DBSession, token: str, payload: ResetPasswordRequest, response: Response
) -> MessageResponse:
    await AuthService(db).reset_password(token, payload.password)
    _clear_refresh_cookie(response)
    return MessageResponse(message="Password reset successfully")


@router.post(
    "/change-password",
    response_model=MessageResponse,
    summary="Change password",
)
async def change_password(
    db: DBSession,
    current_user: CurrentUser,
    payload: ChangePasswordRequest,
    response: Response,
) -> MessageResponse:
    await AuthService(db).change_password(
        current_user, payload.old_password, payload.new_password
    )
    _clear_refresh_cookie(response)
    return MessageResponse(message="Password changed successfully")
