"""
errors.py — Failure taxonomy for the review submission endpoint
================================================================
Every failure the endpoint can report is one of four kinds. All of them
render as ``{"error": <message>}`` with the status code carried on the
exception; the handler is installed in main.py.

    InvalidSubmission     400  client-correctable, nothing written
    SubmissionThrottled   429  client-correctable after waiting, nothing written
    PersistenceFailure    500  a store call failed, logged
    UnexpectedFailure     500  anything else, logged
"""
from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse

# Sent on every submit-review response, including errors
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


class ReviewServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidSubmission(ReviewServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class SubmissionThrottled(ReviewServiceError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, wait_minutes: int) -> None:
        unit = "minute" if wait_minutes == 1 else "minutes"
        super().__init__(
            f"Please wait {wait_minutes} {unit} before submitting another review."
        )
        self.wait_minutes = wait_minutes


class PersistenceFailure(ReviewServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UnexpectedFailure(ReviewServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers=CORS_HEADERS,
    )


async def review_service_error_handler(request: Request, exc: ReviewServiceError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)
