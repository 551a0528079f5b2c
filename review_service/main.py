from __future__ import annotations

import logging
import sys

from fastapi import FastAPI
from pythonjsonlogger import jsonlogger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import settings
from .cors import PathExemptCORSMiddleware
from .database import init_db
from .errors import ReviewServiceError, review_service_error_handler
from .rate_limit import limiter
from .api import routes_admin, routes_leaderboard, routes_reviews, routes_submit
from .auth.routes_auth import router as auth_router
from .auth.seed import seed_admin

# ---------------------------------------------------------------------------
# Structured logging
# ---------------------------------------------------------------------------

def _configure_logging() -> None:
    """Configure structured JSON logging when log_format=json (default)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        handler.setFormatter(jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        ))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        ))
    root.addHandler(handler)

_configure_logging()

# Initialise database tables on startup
init_db()

# Seed default moderator if no admin accounts exist
seed_admin()

app = FastAPI(
    title="Faculty Review Service",
    version="1.0.0",
    description=(
        "Anonymous faculty reviews: throttled review submission, per-faculty "
        "listings and statistics, a leaderboard and admin moderation."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# Rate limiting (admin login)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Review submission failures render as {"error": ...}
app.add_exception_handler(ReviewServiceError, review_service_error_handler)

app.add_middleware(
    PathExemptCORSMiddleware,
    exempt_paths=[routes_submit.SUBMIT_PATH],
    allow_origins=settings.allow_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routes_submit.router)
app.include_router(routes_reviews.router)
app.include_router(routes_leaderboard.router)
app.include_router(auth_router)
app.include_router(routes_admin.router)


@app.get("/", tags=["meta"])
def root() -> dict:
    return {"status": "ok", "service": "faculty-review-service", "version": "1.0.0"}


@app.get("/health", tags=["meta"])
def health() -> dict:
    return {"status": "healthy"}
