"""Identity collaborator: bcrypt passwords and cookie sessions.

Its only job for the engine is turning a session cookie into the
``Caller`` the access policy checks.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta

import bcrypt
from fastapi import Request, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from workorders.db import crud
from workorders.models import User
from workorders.services.access import Caller

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "session_id"
SESSION_MAX_AGE_DAYS = 7


@dataclass
class AuthContext:
    user_id: str
    role: str  # admin | staff | client
    email: str
    display_name: str

    @classmethod
    def from_user(cls, user: User) -> AuthContext:
        return cls(user_id=user.id, role=user.role, email=user.email, display_name=user.display_name)

    @property
    def caller(self) -> Caller:
        return Caller(id=self.user_id, role=self.role, name=self.display_name or self.email)


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash (seeded or disabled account)
        return False


def _hash_token(token: str) -> str:
    """Only the SHA-256 of a session token is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


async def authenticate(db: AsyncSession, email: str, password: str, ip_address: str = "") -> tuple[User, str] | None:
    """Check credentials and open a session. Returns (user, raw token) or None."""
    user = await crud.get_user_by_email(db, email)
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", email)
        return None

    token = secrets.token_urlsafe(48)
    now = datetime.now(timezone.utc)
    user.last_login_at = now
    await crud.create_user_session(
        db, user.id, _hash_token(token), now + timedelta(days=SESSION_MAX_AGE_DAYS), ip_address,
    )
    return user, token


async def resolve_session(db: AsyncSession, token: str) -> AuthContext | None:
    session = await crud.get_live_session(db, _hash_token(token), datetime.now(timezone.utc))
    if session is None:
        return None
    user = await crud.get_user(db, session.user_id)
    if user is None or not user.is_active:
        return None
    return AuthContext.from_user(user)


async def end_session(db: AsyncSession, token: str) -> None:
    await crud.delete_user_session(db, _hash_token(token))


async def get_current_user(request: Request, db: AsyncSession) -> AuthContext:
    """AuthContext for the request's session cookie; 401 when missing or stale."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    auth = await resolve_session(db, token)
    if auth is None:
        raise HTTPException(status_code=401, detail="Session expired")
    return auth
