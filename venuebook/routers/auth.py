"""
Authentication endpoints – email/password accounts with JWT session cookies.
"""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, HTTPException, Request, Response, status

from venuebook import db
from venuebook.config import PASSWORD_RESET_TTL_MINUTES
from venuebook.dependencies import SESSION_COOKIE, CurrentUser, Superadmin, create_session_cookie
from venuebook.errors import Conflict, ValidationFailed
from venuebook.models import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    PasswordChangeRequest,
    PasswordResetTokenRequest,
    SignupRequest,
    UserInfo,
)
from venuebook.rate_limit import AUTH, STRICT, limiter
from venuebook.services.email import send_password_reset_email
from venuebook.services.passwords import (
    MIN_PASSWORD_LENGTH,
    hash_password,
    hash_reset_token,
    new_reset_token,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

_FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent."


def _user_info(row) -> UserInfo:
    return UserInfo(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        role=row["role"],
        phone=row["phone"],
        last_login=row["last_login"],
        created_at=row["created_at"],
    )


def _check_new_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            fields=["new_password"],
        )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="signup",
    summary="Create an admin account and start a session",
)
@limiter.limit(AUTH)
async def signup(request: Request, body: SignupRequest, response: Response) -> AuthResponse:
    if await db.get_user_by_email(body.email) is not None:
        raise Conflict("An account with this email already exists")

    row = await db.create_user(
        body.name.strip(),
        body.email,
        password_hash=hash_password(body.password),
        role="admin",
        phone=body.phone,
    )
    logger.info("Admin account created for %s", row["email"])

    create_session_cookie(response, row["id"], row["email"], row["role"])
    return AuthResponse(message="Account created successfully", user=_user_info(row))


@router.post(
    "/login",
    response_model=AuthResponse,
    operation_id="login",
    summary="Verify credentials and receive a JWT session cookie",
)
@limiter.limit(AUTH)
async def login(request: Request, body: LoginRequest, response: Response) -> AuthResponse:
    row = await db.get_user_by_email(body.email)
    if row is None or not verify_password(body.password, row["password_hash"]):
        logger.warning("Failed login for %s", body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not row["is_active"]:
        logger.warning("Login attempt on disabled account %s", body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is disabled",
        )

    await db.touch_last_login(row["id"])
    row = await db.get_user(row["id"])

    create_session_cookie(response, row["id"], row["email"], row["role"])
    return AuthResponse(message="Authenticated successfully", user=_user_info(row))


@router.post(
    "/logout",
    response_model=MessageResponse,
    operation_id="logout",
    summary="Clear the session cookie",
)
async def logout(current_user: CurrentUser, response: Response) -> MessageResponse:
    response.delete_cookie(SESSION_COOKIE)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/me",
    response_model=UserInfo,
    operation_id="getMe",
    summary="Get current authenticated user info",
)
async def get_me(current_user: CurrentUser) -> UserInfo:
    row = await db.get_user(current_user.id)
    if row is None:
        # Account removed after the cookie was issued
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return _user_info(row)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    operation_id="resetPassword",
    summary="Change the superadmin's own password",
)
@limiter.limit(AUTH)
async def reset_password(
    request: Request,
    body: PasswordChangeRequest,
    current_user: Superadmin,
) -> MessageResponse:
    if body.new_password != body.confirm_password:
        raise ValidationFailed("New passwords do not match", fields=["confirm_password"])
    _check_new_password(body.new_password)

    row = await db.get_user(current_user.id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not verify_password(body.current_password, row["password_hash"]):
        logger.warning("Wrong current password on password change for %s", current_user.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )

    await db.set_password(row["id"], hash_password(body.new_password))
    logger.info("Password changed for %s", current_user.email)
    return MessageResponse(message="Password updated successfully")


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    operation_id="forgotPassword",
    summary="Email a password reset link to a superadmin",
)
@limiter.limit(STRICT)
async def forgot_password(request: Request, body: ForgotPasswordRequest) -> MessageResponse:
    """
    Issue a reset token for a superadmin account.

    The response is the same whether or not the email belongs to one.
    """
    row = await db.get_user_by_email(body.email)
    if row is None or row["role"] != "superadmin":
        logger.info("Password reset requested for unknown or non-superadmin %s", body.email)
        return MessageResponse(message=_FORGOT_PASSWORD_MESSAGE)

    token, token_hash = new_reset_token()
    expires = datetime.now(timezone.utc) + timedelta(minutes=PASSWORD_RESET_TTL_MINUTES)
    await db.set_password_reset(row["id"], token_hash, expires)

    try:
        await send_password_reset_email(row["email"], token)
    except Exception:
        logger.exception("Password reset email to %s failed", row["email"])

    return MessageResponse(message=_FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/reset-password-token",
    response_model=MessageResponse,
    operation_id="resetPasswordWithToken",
    summary="Set a new password using a reset token",
)
@limiter.limit(AUTH)
async def reset_password_with_token(request: Request, body: PasswordResetTokenRequest) -> MessageResponse:
    _check_new_password(body.new_password)

    row = await db.get_user_by_reset_token(hash_reset_token(body.token))
    expires = datetime.fromisoformat(row["password_reset_expires"]) if row and row["password_reset_expires"] else None
    if row is None or row["role"] != "superadmin" or expires is None or expires <= datetime.now(timezone.utc):
        raise ValidationFailed("Invalid or expired reset token", fields=["token"])

    await db.set_password(row["id"], hash_password(body.new_password))
    logger.info("Password reset via token for %s", row["email"])
    return MessageResponse(message="Password has been reset successfully")
