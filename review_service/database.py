"""
database.py — Engine, session scope and schema bootstrap
========================================================
SQLite is the local default; set REVIEWS_DATABASE_URL to a PostgreSQL
URL in production. Both support the ON CONFLICT upsert the rate-limit
store relies on.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import settings


class Base(DeclarativeBase):
    pass


def _connect_args(url: str) -> dict:
    # Route handlers run in a thread pool; SQLite connections are shared across it
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


engine = create_engine(
    settings.database_url,
    echo=settings.log_sql,
    connect_args=_connect_args(settings.database_url),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def db_session() -> Iterator[Session]:
    """One unit of work: commit when the block exits cleanly, roll back otherwise."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Create reviews, rate_limits and admin_users if they are missing."""
    from . import models  # noqa: F401 — register tables

    Base.metadata.create_all(bind=engine)
