"""
End-to-end tests for POST /submit-review: validation, throttling,
two-phase persistence and response shaping.

Run with: pytest tests/test_submit_review.py -v
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from review_service import rate_limit_store, review_store
from review_service.api import routes_submit
from review_service.database import db_session
from review_service.main import app
from review_service.models import RateLimit, Review
from review_service.submission.client_key import derive_client_key


client = TestClient(app)

ORIGIN = "203.0.113.7"
OTHER_ORIGIN = "198.51.100.23"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _submit(body: dict, origin: str | None = ORIGIN):
    headers = {"X-Forwarded-For": origin} if origin else {}
    return client.post("/submit-review", json=body, headers=headers)


def _review_count() -> int:
    with db_session() as session:
        return session.execute(select(func.count()).select_from(Review)).scalar_one()


def _rate_limit_rows() -> list:
    with db_session() as session:
        return session.execute(select(RateLimit)).scalars().all()


def _backdate(origin: str, minutes: float) -> datetime:
    stamp = datetime.now(timezone.utc) - timedelta(minutes=minutes)
    with db_session() as session:
        row = session.get(RateLimit, derive_client_key(origin))
        row.last_submission_at = stamp
    return stamp


GOOD = {"facultyId": "cs-101", "rating": 5, "comment": "Great teacher"}


# ---------------------------------------------------------------------------
# Acceptance
# ---------------------------------------------------------------------------

class TestAccepted:
    def test_returns_persisted_review(self):
        resp = _submit(GOOD)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        data = body["data"]
        assert data["faculty_id"] == "cs-101"
        assert data["rating"] == 5
        assert data["comment"] == "Great teacher"
        assert data["id"]
        assert data["created_at"]

    def test_first_submission_creates_one_rate_limit_record(self):
        _submit(GOOD)
        rows = _rate_limit_rows()
        assert len(rows) == 1
        assert rows[0].client_key == derive_client_key(ORIGIN)
        assert rows[0].submission_count == 1

    def test_raw_address_never_stored(self):
        _submit(GOOD)
        row = _rate_limit_rows()[0]
        assert ORIGIN not in row.client_key
        assert len(row.client_key) == 64

    @pytest.mark.parametrize("comment", ["", None])
    def test_empty_comment_stored_as_null(self, comment):
        resp = _submit({"facultyId": "cs-101", "rating": 3, "comment": comment})
        assert resp.status_code == 200
        assert resp.json()["data"]["comment"] is None

    def test_absent_comment_accepted(self):
        resp = _submit({"facultyId": "cs-101", "rating": 1})
        assert resp.status_code == 200
        assert resp.json()["data"]["comment"] is None

    def test_comment_trimmed(self):
        resp = _submit({"facultyId": "cs-101", "rating": 4, "comment": "  clear notes \n"})
        assert resp.json()["data"]["comment"] == "clear notes"


# ---------------------------------------------------------------------------
# Validation (400) — nothing written
# ---------------------------------------------------------------------------

class TestRejected:
    def test_rating_out_of_range(self):
        resp = _submit({"facultyId": "cs-101", "rating": 6})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Rating must be between 1 and 5"}
        assert _review_count() == 0
        assert _rate_limit_rows() == []

    @pytest.mark.parametrize("rating", [0, -3, "five", None, True])
    def test_invalid_ratings_write_nothing(self, rating):
        resp = _submit({"facultyId": "cs-101", "rating": rating})
        assert resp.status_code == 400
        assert _review_count() == 0
        assert _rate_limit_rows() == []

    def test_comment_too_long(self):
        resp = _submit({"facultyId": "cs-101", "rating": 3, "comment": "x" * 501})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Comment must be at most 500 characters"}
        assert _review_count() == 0

    def test_invalid_faculty_id(self):
        resp = _submit({"facultyId": 42, "rating": 3})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid faculty ID"}

    def test_malformed_json(self):
        resp = client.post(
            "/submit-review",
            content=b"{not json",
            headers={"Content-Type": "application/json", "X-Forwarded-For": ORIGIN},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Request body must be a JSON object"}

    def test_invalid_request_does_not_consume_cooldown(self):
        _submit({"facultyId": "cs-101", "rating": 9})
        assert _submit(GOOD).status_code == 200


# ---------------------------------------------------------------------------
# Throttling (429)
# ---------------------------------------------------------------------------

class TestThrottled:
    def test_immediate_resubmission_is_throttled(self):
        first = _submit(GOOD)
        second = _submit(GOOD)
        assert first.status_code == 200
        assert second.status_code == 429
        assert "5 minutes" in second.json()["error"]

    def test_throttled_request_mutates_nothing(self):
        _submit(GOOD)
        before = _rate_limit_rows()[0]
        _submit({"facultyId": "ee-202", "rating": 2})
        after = _rate_limit_rows()[0]
        assert _review_count() == 1
        assert after.submission_count == before.submission_count == 1
        assert after.last_submission_at == before.last_submission_at

    def test_singular_minute_message(self):
        _submit(GOOD)
        _backdate(ORIGIN, 4.5)
        resp = _submit(GOOD)
        assert resp.status_code == 429
        assert resp.json() == {"error": "Please wait 1 minute before submitting another review."}

    def test_submission_after_cooldown_increments_count(self):
        _submit(GOOD)
        stamp = _backdate(ORIGIN, 6)
        resp = _submit({"facultyId": "cs-101", "rating": 4})
        assert resp.status_code == 200
        row = _rate_limit_rows()[0]
        assert row.submission_count == 2
        assert row.last_submission_at.replace(tzinfo=None) > stamp.replace(tzinfo=None)

    def test_exactly_five_minutes_is_allowed(self):
        _submit(GOOD)
        _backdate(ORIGIN, 5)
        assert _submit(GOOD).status_code == 200

    def test_identical_content_after_cooldown_creates_second_review(self):
        first = _submit(GOOD).json()["data"]
        _backdate(ORIGIN, 10)
        second = _submit(GOOD).json()["data"]
        assert first["id"] != second["id"]
        assert _review_count() == 2

    def test_different_origins_do_not_throttle_each_other(self):
        assert _submit(GOOD, origin=ORIGIN).status_code == 200
        assert _submit(GOOD, origin=OTHER_ORIGIN).status_code == 200
        assert len(_rate_limit_rows()) == 2

    def test_headerless_clients_share_one_bucket(self):
        assert _submit(GOOD, origin=None).status_code == 200
        resp = client.post(
            "/submit-review", json=GOOD, headers={"User-Agent": "a-different-browser"},
        )
        assert resp.status_code == 429

    def test_real_ip_header_identifies_client(self):
        client.post("/submit-review", json=GOOD, headers={"X-Real-IP": OTHER_ORIGIN})
        resp = _submit(GOOD, origin=OTHER_ORIGIN)
        assert resp.status_code == 429


# ---------------------------------------------------------------------------
# Persistence failures
# ---------------------------------------------------------------------------

def _db_error(*_args, **_kwargs):
    raise OperationalError("INSERT", {}, Exception("disk I/O error"))


class TestPersistenceFailures:
    def test_insert_failure_returns_500_and_skips_rate_limit(self, monkeypatch):
        monkeypatch.setattr(review_store, "insert_review", _db_error)
        resp = _submit(GOOD)
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to submit review"}
        assert _rate_limit_rows() == []

    def test_constraint_violation_on_insert_is_persistence_failure(self, monkeypatch):
        def integrity(*_args, **_kwargs):
            raise IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed"))

        monkeypatch.setattr(review_store, "insert_review", integrity)
        assert _submit(GOOD).status_code == 500

    def test_rate_limit_update_failure_still_succeeds(self, monkeypatch):
        monkeypatch.setattr(rate_limit_store, "record_submission", _db_error)
        resp = _submit(GOOD)
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert _review_count() == 1
        assert _rate_limit_rows() == []

    def test_lost_rate_limit_update_lets_next_request_through(self, monkeypatch):
        monkeypatch.setattr(rate_limit_store, "record_submission", _db_error)
        assert _submit(GOOD).status_code == 200
        assert _submit(GOOD).status_code == 200
        assert _review_count() == 2

    def test_non_database_error_in_rate_limit_update_still_succeeds(self, monkeypatch):
        def broken(*_args, **_kwargs):
            raise RuntimeError("rate limit backend unavailable")

        monkeypatch.setattr(rate_limit_store, "record_submission", broken)
        resp = _submit(GOOD)
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert _review_count() == 1

    def test_dialect_without_upsert_still_records_submission(self, monkeypatch):
        monkeypatch.setattr(rate_limit_store, "_UPSERT_DIALECTS", {})
        assert _submit(GOOD).status_code == 200
        rows = _rate_limit_rows()
        assert len(rows) == 1
        assert rows[0].submission_count == 1
        assert _submit(GOOD).status_code == 429

    def test_rate_limit_lookup_failure_returns_500(self, monkeypatch):
        monkeypatch.setattr(rate_limit_store, "get_rate_limit", _db_error)
        resp = _submit(GOOD)
        assert resp.status_code == 500
        assert _review_count() == 0

    def test_unexpected_error_returns_generic_500(self, monkeypatch):
        def explode(*_args, **_kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(routes_submit, "process_submission", explode)
        resp = _submit(GOOD)
        assert resp.status_code == 500
        assert resp.json() == {"error": "An unexpected error occurred"}


# ---------------------------------------------------------------------------
# Cross-origin headers
# ---------------------------------------------------------------------------

class TestCors:
    def test_browser_preflight_answered_by_endpoint(self):
        resp = client.options(
            "/submit-review",
            headers={
                "Origin": "https://example.org",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type, x-client-info",
            },
        )
        assert resp.status_code == 200
        assert resp.content == b""
        assert resp.headers["access-control-allow-origin"] == "*"
        assert resp.headers["access-control-allow-headers"] == (
            "authorization, x-client-info, apikey, content-type"
        )
        assert "access-control-allow-credentials" not in resp.headers

    def test_post_with_origin_gets_wildcard_origin(self):
        resp = client.post(
            "/submit-review",
            json=GOOD,
            headers={"Origin": "https://example.org", "X-Forwarded-For": ORIGIN},
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "access-control-allow-credentials" not in resp.headers

    def test_other_routes_keep_app_wide_cors(self):
        resp = client.get("/reviews/stats", headers={"Origin": "https://example.org"})
        assert resp.status_code == 200
        assert "access-control-allow-origin" in resp.headers

    def test_preflight_returns_headers_without_body(self):
        resp = client.options("/submit-review")
        assert resp.status_code == 200
        assert resp.content == b""
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "content-type" in resp.headers["access-control-allow-headers"]

    @pytest.mark.parametrize("body, status", [
        (GOOD, 200),
        ({"facultyId": "cs-101", "rating": 6}, 400),
    ])
    def test_responses_carry_cors_and_json(self, body, status):
        resp = _submit(body)
        assert resp.status_code == status
        assert resp.headers["access-control-allow-origin"] == "*"
        assert resp.headers["content-type"].startswith("application/json")

    def test_throttled_response_carries_cors(self):
        _submit(GOOD)
        resp = _submit(GOOD)
        assert resp.status_code == 429
        assert resp.headers["access-control-allow-origin"] == "*"
