from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..errors import CORS_HEADERS, ReviewServiceError, UnexpectedFailure
from ..schemas import ErrorResponse, SubmitReviewResponse
from ..submission.pipeline import process_submission

logger = logging.getLogger("reviews.submission")

router = APIRouter(tags=["submission"])

SUBMIT_PATH = "/submit-review"


@router.options(SUBMIT_PATH, include_in_schema=False)
def submit_review_preflight() -> Response:
    """CORS pre-flight: headers only, no body."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
    SUBMIT_PATH,
    response_model=SubmitReviewResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid facultyId, rating or comment."},
        429: {"model": ErrorResponse, "description": "Submitted too recently from this network origin."},
        500: {"model": ErrorResponse, "description": "Persistence failure or unexpected error."},
    },
)
async def submit_review(request: Request) -> JSONResponse:
    """Submit an anonymous review.

    Body: ``{"facultyId": str, "rating": number, "comment"?: str}``.
    One accepted review per network origin per cooldown window.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        # The validator rejects a missing body with a 400
        payload = None

    try:
        review = await run_in_threadpool(process_submission, payload, request.headers)
    except ReviewServiceError:
        raise
    except Exception as exc:
        logger.exception("Unexpected error: %s", exc)
        raise UnexpectedFailure("An unexpected error occurred") from exc

    body = SubmitReviewResponse(data=review)
    return JSONResponse(content=body.model_dump(mode="json"), headers=CORS_HEADERS)
