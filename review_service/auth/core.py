"""
auth/core.py — Moderator credentials
====================================
Passwords are stored as bcrypt hashes. A successful login returns an
HS256 JWT whose subject is the admin username; only tokens carrying
``role: admin`` open the moderation routes.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt

from ..config import settings

ALGORITHM = "HS256"
ADMIN_ROLE = "admin"


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def create_access_token(subject: str, expires_minutes: int | None = None) -> str:
    issued = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or settings.jwt_expire_minutes)
    claims = {"sub": subject, "role": ADMIN_ROLE, "iat": issued, "exp": issued + lifetime}
    return jwt.encode(claims, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Return the verified claims. Raises JWTError if the token is forged or expired."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
