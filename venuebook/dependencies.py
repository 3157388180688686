import logging
from datetime import UTC, datetime, timedelta
from typing import Annotated

import jwt
from fastapi import Cookie, Depends, HTTPException, Response, status

from venuebook import db
from venuebook.config import ENVIRONMENT, JWT_ALGORITHM, JWT_EXPIRY_DAYS, JWT_SECRET
from venuebook.models import SessionUser, Venue

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"


# ── JWT / Session ──────────────────────────────────────────────────────────


def create_jwt(user_id: str, email: str, role: str) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(days=JWT_EXPIRY_DAYS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def create_session_cookie(response: Response, user_id: str, email: str, role: str) -> None:
    token = create_jwt(user_id, email, role)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        secure=ENVIRONMENT == "production",
        max_age=JWT_EXPIRY_DAYS * 86400,
    )


def decode_session(session: str | None) -> SessionUser | None:
    """Decode a session cookie, or None if it is missing or invalid."""
    if not session:
        return None
    try:
        payload = jwt.decode(session, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None

    if not payload.get("sub") or not payload.get("email"):
        return None
    if payload.get("role") not in ("admin", "superadmin"):
        return None
    return SessionUser(id=payload["sub"], email=payload["email"], role=payload["role"])


async def _load_account(user: SessionUser) -> SessionUser | None:
    """Re-read a session's account; identity and role come from the users table, not the cookie."""
    row = await db.get_user(user.id)
    if row is None or not row["is_active"]:
        logger.warning("Session for missing or disabled account %s rejected", user.email)
        return None
    return SessionUser(id=row["id"], email=row["email"], role=row["role"])


async def get_current_user(
    session: Annotated[str | None, Cookie()] = None,
) -> SessionUser:
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Please log in via /api/auth/login",
        )

    try:
        jwt.decode(session, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired. Please log in again.",
        ) from None
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session. Please log in again.",
        ) from None

    user = decode_session(session)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload.",
        )

    account = await _load_account(user)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account no longer exists. Please log in again.",
        )
    return account


async def get_optional_user(
    session: Annotated[str | None, Cookie()] = None,
) -> SessionUser | None:
    """Like get_current_user, but public endpoints get None instead of a 401."""
    user = decode_session(session)
    if user is None:
        return None
    return await _load_account(user)


async def require_superadmin(
    user: Annotated[SessionUser, Depends(get_current_user)],
) -> SessionUser:
    if not user.is_superadmin:
        logger.warning("Superadmin route denied for %s", user.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


CurrentUser = Annotated[SessionUser, Depends(get_current_user)]
OptionalUser = Annotated[SessionUser | None, Depends(get_optional_user)]
Superadmin = Annotated[SessionUser, Depends(require_superadmin)]


# ── Authorization ──────────────────────────────────────────────────────────


def can_mutate(user: SessionUser | None, venue: Venue) -> bool:
    """True if ``user`` may change ``venue`` (or anything hanging off it)."""
    if user is None:
        return False
    if user.is_superadmin:
        return True
    return user.owner_id == venue.owner.owner_id

