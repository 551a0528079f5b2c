from __future__ import annotations

from fastapi import HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select

from .core import ADMIN_ROLE, decode_token
from ..database import db_session
from ..models import AdminUser

bearer_scheme = HTTPBearer(auto_error=False)


def require_admin(
    bearer: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> AdminUser:
    """Resolve the moderator behind an ``Authorization: Bearer <jwt>`` header or raise 401."""
    if not bearer or not bearer.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No credentials provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_token(bearer.credentials)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Invalid or expired token.")

    if payload.get("role") != ADMIN_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="Admin access required.")

    with db_session() as session:
        user = session.execute(
            select(AdminUser).where(AdminUser.username == payload.get("sub", ""))
        ).scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="User not found or inactive.")
    return user
