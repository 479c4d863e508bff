"""Tests for the waitlist HTTP API."""

import pytest
from fastapi.testclient import TestClient

from waitlist.api.deps import get_waitlist_service
from waitlist.api.main import create_app
from waitlist.api.rate_limit import limiter
from waitlist.referral.feed import LeaderboardFeed
from waitlist.settings import settings
from waitlist.signup.service import WaitlistService


@pytest.fixture
def app(form_service):
    app = create_app()
    app.state.feed = LeaderboardFeed(form_service.client())
    app.dependency_overrides[get_waitlist_service] = lambda: WaitlistService(
        form_service.client(), site_url="https://mubx.app"
    )
    return app


@pytest.fixture
def api(app):
    return TestClient(app)


@pytest.fixture
def seeded(form_service, make_submission):
    form_service.submissions = [
        make_submission(1, "Alice", "alice@uni.edu", "AAAA1", created_at="2025-03-01 09:00:00"),
        make_submission(2, "Bob", "bob@uni.edu", "BBBB2", "AAAA1", created_at="2025-03-01 10:00:00"),
        make_submission(3, "Cara", "cara@uni.edu", "CCCC3", "AAAA1", created_at="2025-03-01 11:00:00"),
    ]
    return form_service


def test_health(api):
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_leaderboard(api, seeded):
    response = api.get("/api/v1/leaderboard")

    assert response.status_code == 200
    data = response.json()
    assert [(e["referral_code"], e["referral_count"], e["rank"]) for e in data["entries"]] == [
        ("AAAA1", 2, 1),
        ("BBBB2", 0, 2),
        ("CCCC3", 0, 3),
    ]
    assert data["stats"]["participants"] == 3
    assert data["stats"]["total_referrals"] == 2
    assert data["sequence"] == 1


def test_leaderboard_search_keeps_ranks(api, seeded):
    data = api.get("/api/v1/leaderboard", params={"search": "cara"}).json()

    assert [(e["name"], e["rank"]) for e in data["entries"]] == [("Cara", 3)]
    assert data["stats"]["participants"] == 3


def test_each_request_is_a_new_fetch_cycle(api, seeded):
    api.get("/api/v1/leaderboard")
    data = api.get("/api/v1/leaderboard").json()

    assert data["sequence"] == 2


def test_leaderboard_fetch_failure(api, form_service):
    form_service.fetch_fails = True

    response = api.get("/api/v1/leaderboard")

    assert response.status_code == 502
    assert response.json()["detail"] == "Unable to load leaderboard. Please try again later."


def test_referral_capture_persists_in_cookie(api):
    assert api.get("/api/v1/waitlist/referral", params={"ref": "BOB5678"}).json() == {"referred_by": "BOB5678"}

    # Later visit without the parameter
    assert api.get("/api/v1/waitlist/referral").json() == {"referred_by": "BOB5678"}

    api.delete("/api/v1/waitlist/referral")
    assert api.get("/api/v1/waitlist/referral").json() == {"referred_by": ""}


def test_join_uses_referral_cookie_and_sets_summary(api, form_service):
    api.get("/api/v1/waitlist/referral", params={"ref": "BOB5678"})

    response = api.post("/api/v1/waitlist", json={"name": "Jane", "email": "jane@uni.edu"})

    assert response.status_code == 201
    joined = response.json()
    assert joined["referral_code"].startswith("JANE")
    assert joined["referral_link"] == f"https://mubx.app/?ref={joined['referral_code']}"
    assert form_service.posted_forms[0]["referred_by"] == "BOB5678"

    summary = api.get("/api/v1/waitlist/summary")
    assert summary.status_code == 200
    assert summary.json()["referral_code"] == joined["referral_code"]
    assert summary.json()["email"] == "jane@uni.edu"


def test_join_with_non_latin_name_round_trips_through_cookies(api, form_service):
    response = api.post("/api/v1/waitlist", json={"name": "李雷", "email": "li@uni.edu"})

    assert response.status_code == 201
    assert form_service.posted_forms[0]["name"] == "李雷"

    summary = api.get("/api/v1/waitlist/summary").json()
    assert summary["name"] == "李雷"
    assert summary["email"] == "li@uni.edu"
    assert summary["referral_code"] == response.json()["referral_code"]


def test_non_ascii_referral_code_persists(api):
    assert api.get("/api/v1/waitlist/referral", params={"ref": "ÉCOLE1"}).status_code == 200

    assert api.get("/api/v1/waitlist/referral").json() == {"referred_by": "ÉCOLE1"}


def test_join_duplicate_email(api, seeded):
    response = api.post("/api/v1/waitlist", json={"name": "Alice", "email": "ALICE@uni.edu"})

    assert response.status_code == 409
    assert response.json()["detail"] == "This email has already joined the waitlist."
    assert seeded.posted_forms == []


def test_join_form_post_failure(api, form_service):
    form_service.post_status = 500

    response = api.post("/api/v1/waitlist", json={"name": "Jane", "email": "jane@uni.edu"})

    assert response.status_code == 502


@pytest.mark.parametrize(
    "body",
    [
        {"name": "", "email": "jane@uni.edu"},
        {"name": "   ", "email": "jane@uni.edu"},
        {"name": "Jane", "email": "not-an-email"},
        {"email": "jane@uni.edu"},
    ],
)
def test_join_validation(api, body):
    assert api.post("/api/v1/waitlist", json=body).status_code == 422


def test_check_email(api, seeded):
    data = api.post("/api/v1/waitlist/check-email", json={"email": "Bob@Uni.edu"}).json()

    assert data["result"] == "duplicate"
    assert data["allowed"] is False


def test_check_email_fails_open(api, form_service):
    form_service.fetch_fails = True

    data = api.post("/api/v1/waitlist/check-email", json={"email": "bob@uni.edu"}).json()

    assert data["result"] == "check_failed"
    assert data["allowed"] is True


def test_summary_without_signup(api):
    assert api.get("/api/v1/waitlist/summary").status_code == 404


def test_join_is_rate_limited_when_enabled(api, monkeypatch):
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    allowed = int(settings.signup_rate_limit.split("/")[0])

    statuses = [
        api.post("/api/v1/waitlist", json={"name": "Jane", "email": f"jane{i}@uni.edu"}).status_code
        for i in range(allowed)
    ]
    blocked = api.post("/api/v1/waitlist", json={"name": "Jane", "email": "late@uni.edu"})
    limiter.reset()

    assert statuses == [201] * allowed
    assert blocked.status_code == 429
    assert blocked.json()["detail"] == "Too many requests. Please try again later."


def test_other_endpoints_are_not_rate_limited(api, monkeypatch):
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()

    statuses = {api.get("/health").status_code for _ in range(30)}
    limiter.reset()

    assert statuses == {200}
