from __future__ import annotations

import logging
import os

from sqlalchemy import select

from .core import hash_password
from ..config import settings
from ..database import db_session
from ..models import AdminUser

logger = logging.getLogger("reviews.auth")

_DEFAULT_PASSWORD = "changeme"


def seed_admin() -> None:
    """
    Create a default moderator account on first startup if none exist.
    Credentials are read from environment variables so they can be
    overridden before deployment.

    Defaults (for local dev only):
      REVIEWS_ADMIN_USERNAME = admin
      REVIEWS_ADMIN_PASSWORD = changeme
    """
    username = os.getenv("REVIEWS_ADMIN_USERNAME", "admin")
    password = os.getenv("REVIEWS_ADMIN_PASSWORD", _DEFAULT_PASSWORD)

    with db_session() as session:
        existing = session.execute(select(AdminUser).limit(1)).scalar_one_or_none()
        if existing:
            return

        if password == _DEFAULT_PASSWORD:
            if settings.environment != "development":
                logger.error(
                    "Refusing to seed default admin password in %s environment. "
                    "Set REVIEWS_ADMIN_PASSWORD.",
                    settings.environment,
                )
                return
            logger.warning(
                "Seeding admin with DEFAULT password 'changeme'. "
                "Set REVIEWS_ADMIN_PASSWORD before deploying to production."
            )

        session.add(AdminUser(username=username, password_hash=hash_password(password)))
        logger.info("Default admin created: %s", username)
