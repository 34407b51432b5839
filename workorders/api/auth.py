"""Auth API: session cookie in, session cookie out."""

from __future__ import annotations

from pydantic import BaseModel
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from workorders.db.engine import get_db
from workorders.dependencies import require_auth, client_ip
from workorders.services import auth as auth_service
from workorders.services.auth import AuthContext, SESSION_COOKIE_NAME, SESSION_MAX_AGE_DAYS

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/login")
async def login(body: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    result = await auth_service.authenticate(db, body.email, body.password, client_ip(request) or "")
    if result is None:
        return JSONResponse(status_code=401, content={"detail": "Invalid credentials"})
    user, token = result

    response = JSONResponse(content={"user_id": user.id, "role": user.role})
    response.set_cookie(
        SESSION_COOKIE_NAME, token,
        httponly=True, samesite="lax", max_age=86400 * SESSION_MAX_AGE_DAYS,
    )
    return response


@router.post("/logout")
async def logout(request: Request, db: AsyncSession = Depends(get_db)):
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        await auth_service.end_session(db, token)
    response = JSONResponse(content={"ok": True})
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


@router.get("/me")
async def me(auth: AuthContext = Depends(require_auth)):
    return {
        "user_id": auth.user_id,
        "role": auth.role,
        "email": auth.email,
        "display_name": auth.display_name,
    }
