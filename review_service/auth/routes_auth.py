from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel
from sqlalchemy import select

from .core import create_access_token, verify_password
from ..config import settings
from ..database import db_session
from ..models import AdminUser
from ..rate_limit import limiter

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    username: str


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, body: LoginRequest) -> TokenResponse:
    with db_session() as session:
        user = session.execute(
            select(AdminUser).where(AdminUser.username == body.username)
        ).scalar_one_or_none()

        if not user or not user.is_active or not verify_password(body.password, user.password_hash):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                                detail="Invalid credentials.")

        user.last_login_at = datetime.now(timezone.utc)
        username = user.username

    return TokenResponse(access_token=create_access_token(subject=username), username=username)
