"""
Notes Backend - Auth Route Handlers
====================================

What:  /api/auth endpoints: OTP signup and login, Google sign-in, current
       user and logout.
How:   Thin handlers. Parse the body, call AuthService, wrap the result in
       the success envelope. Failures are exceptions handled globally.
       Handlers that write commit before they respond.

Route Inventory:
    POST /api/auth/send-signup-otp   200 | 400 user_exists
    POST /api/auth/signup            201 | 400 invalid_otp / user_exists
    POST /api/auth/send-login-otp    200 | 404 user_not_found
    POST /api/auth/login             200 | 404 / 400
    POST /api/auth/google            200 | 400 invalid_external_token
    GET  /api/auth/me                200 | 401
    POST /api/auth/logout            200 | 401
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from notesapp.database import commit_session, get_db_session
from notesapp.dependencies import get_auth_service, get_current_user
from notesapp.models.user import User
from notesapp.schemas.auth import (
    AuthData,
    AuthResponse,
    CurrentUserData,
    CurrentUserResponse,
    GoogleAuthRequest,
    LoginRequest,
    SendLoginOTPRequest,
    SendSignupOTPRequest,
    SignupRequest,
    UserResponse,
)
from notesapp.schemas.common import ErrorResponse, MessageResponse
from notesapp.services.auth_service import AuthResult, AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

_ERRORS = {
    400: {"description": "Invalid input or rejected credential", "model": ErrorResponse},
    500: {"description": "Server or email delivery error", "model": ErrorResponse},
}


def _auth_response(message: str, result: AuthResult) -> AuthResponse:
    return AuthResponse(
        message=message,
        data=AuthData(user=UserResponse.model_validate(result.user), token=result.token),
    )


@router.post(
    "/send-signup-otp",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Email a signup passcode",
)
async def send_signup_otp(
    body: SendSignupOTPRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.send_signup_otp(db, email=body.email, name=body.name)
    await commit_session(db)
    return MessageResponse(message="OTP sent to your email. Please check your inbox.")


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    summary="Create an account with a signup passcode",
)
async def signup(
    body: SignupRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    result = await auth_service.signup(
        db, name=body.name, email=body.email, dob=body.dob, otp=body.otp
    )
    await commit_session(db)
    return _auth_response("Account created successfully!", result)


@router.post(
    "/send-login-otp",
    response_model=MessageResponse,
    responses={**_ERRORS, 404: {"description": "No such account", "model": ErrorResponse}},
    summary="Email a login passcode",
)
async def send_login_otp(
    body: SendLoginOTPRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.send_login_otp(db, email=body.email)
    await commit_session(db)
    return MessageResponse(message="Login OTP sent to your email.")


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={**_ERRORS, 404: {"description": "No such account", "model": ErrorResponse}},
    summary="Log in with a login passcode",
    description="rememberMe=true issues a longer-lived session token.",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    result = await auth_service.login(
        db, email=body.email, otp=body.otp, remember_me=body.remember_me
    )
    await commit_session(db)
    return _auth_response("Login successful!", result)


@router.post(
    "/google",
    response_model=AuthResponse,
    responses=_ERRORS,
    summary="Sign in with a Google ID token",
)
async def google_auth(
    body: GoogleAuthRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    result = await auth_service.google_auth(db, id_token=body.id_token)
    await commit_session(db)
    message = "Account created and logged in!" if result.created else "Login successful!"
    return _auth_response(message, result)


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Current user",
)
async def me(user: User = Depends(get_current_user)) -> CurrentUserResponse:
    return CurrentUserResponse(data=CurrentUserData(user=UserResponse.model_validate(user)))


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Log out",
    description="Tokens are stateless; the client discards its token.",
)
async def logout(user: User = Depends(get_current_user)) -> MessageResponse:
    logger.info("User %d logged out", user.id)
    return MessageResponse(message="Logged out successfully.")
