"""Shared fixtures: submission factories and a fake hosted form service."""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from waitlist.submissions.client import SubmissionClient
from waitlist.submissions.models import RawSubmission

SUBMISSIONS_URL = "https://forms.test/v1/access_form.php"
FORM_ACTION = "https://forms.test/f/test-key"


def build_submission(
    submission_id,
    name=None,
    email=None,
    referral_code=None,
    referred_by=None,
    created_at="2025-03-01 09:00:00",
) -> RawSubmission:
    fields = {
        "name": name,
        "email": email,
        "referral_code": referral_code,
        "referred_by": referred_by,
    }
    payload = {key: value for key, value in fields.items() if value is not None}
    return RawSubmission(
        submission_id=str(submission_id),
        submitted_data=json.dumps(payload),
        created_at=created_at,
    )


class FakeFormService:
    """In-memory stand-in for the hosted form service, served via MockTransport."""

    def __init__(self):
        self.submissions: list[RawSubmission] = []
        self.fetch_response: httpx.Response | None = None
        self.fetch_fails = False
        self.post_status = 302
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.method == "GET":
            if self.fetch_fails:
                raise httpx.ConnectError("connection refused", request=request)
            if self.fetch_response is not None:
                return self.fetch_response
            return httpx.Response(
                200,
                json={
                    "status": "success",
                    "submissions": {
                        "data": [s.model_dump() for s in self.submissions],
                    },
                },
            )

        headers = {"Location": "https://site.test/success"} if self.post_status in (301, 302, 303) else {}
        return httpx.Response(self.post_status, headers=headers)

    @property
    def posted_forms(self) -> list[dict[str, str]]:
        forms = []
        for request in self.requests:
            if request.method == "POST":
                parsed = parse_qs(request.content.decode(), keep_blank_values=True)
                forms.append({key: values[0] for key, values in parsed.items()})
        return forms

    def client(self) -> SubmissionClient:
        return SubmissionClient(
            api_key="test-key",
            access_token="test-token",
            submissions_url=SUBMISSIONS_URL,
            form_action=FORM_ACTION,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def make_submission():
    """Factory for RawSubmission objects with a JSON payload."""
    return build_submission


@pytest.fixture
def form_service():
    return FakeFormService()
