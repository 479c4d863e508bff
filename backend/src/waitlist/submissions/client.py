"""ProForms integration for reading and writing waitlist submissions.

The hosted form service owns all durable storage:
- Read: GET access_form.php?api_key=...&access_token=... returns every submission
- Write: a plain form POST to the hosted form endpoint

There are no retries. A failed read surfaces immediately to the caller.
"""

from typing import Any

import httpx
from pydantic import ValidationError

from waitlist.errors import SubmissionFetchError, SubmissionWriteError
from waitlist.logging_config import get_logger
from waitlist.referral.models import SignupForm
from waitlist.settings import settings
from waitlist.submissions.models import RawSubmission, SubmissionEnvelope

logger = get_logger(__name__)


class SubmissionClient:
    """Client for the hosted form service."""

    def __init__(
        self,
        api_key: str = None,
        access_token: str = None,
        submissions_url: str = None,
        form_action: str = None,
        timeout: float = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize submission client.

        Args:
            api_key: Form service API key. If not provided, uses settings.
            access_token: Form service access token. If not provided, uses settings.
            submissions_url: Read endpoint override
            form_action: Write endpoint override
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.api_key = api_key if api_key is not None else settings.proforms_api_key
        self.access_token = (
            access_token if access_token is not None else settings.proforms_access_token
        )
        self.submissions_url = submissions_url or settings.submissions_url
        self.form_action = form_action or settings.form_action_url.format(api_key=self.api_key)
        self.timeout = timeout or settings.request_timeout_seconds
        self.transport = transport
        self.logger = get_logger(__name__)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key and self.access_token)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def fetch_submissions(self) -> list[RawSubmission]:
        """Fetch the full submission set.

        Returns:
            Submissions in the order the service returned them

        Raises:
            SubmissionFetchError: On any network, status or envelope failure
        """
        if not self.enabled:
            raise SubmissionFetchError(
                "Form service credentials are not configured",
                error_code="not_configured",
            )

        params = {"api_key": self.api_key, "access_token": self.access_token}

        async with self._client() as client:
            try:
                response = await client.get(self.submissions_url, params=params)
            except httpx.TimeoutException:
                raise SubmissionFetchError("Request timeout", error_code="timeout")
            except httpx.RequestError as e:
                raise SubmissionFetchError(f"Request failed: {str(e)}", error_code="request_error")

        if not response.is_success:
            raise SubmissionFetchError(
                f"Form service returned HTTP {response.status_code}",
                status_code=response.status_code,
                error_code="http_error",
            )

        try:
            payload: Any = response.json()
        except ValueError:
            raise SubmissionFetchError(
                "Form service returned a non-JSON body",
                status_code=response.status_code,
                error_code="invalid_json",
            )

        submissions = self._unwrap(payload, response.status_code)

        self.logger.info("submissions_fetched", count=len(submissions))
        return submissions

    def _unwrap(self, payload: Any, status_code: int) -> list[RawSubmission]:
        """Validate the success envelope and return its submissions."""
        if not isinstance(payload, dict) or payload.get("status") != "success":
            status = payload.get("status") if isinstance(payload, dict) else None
            raise SubmissionFetchError(
                f"Unexpected envelope status: {status!r}",
                status_code=status_code,
                error_code="bad_envelope",
            )

        try:
            envelope = SubmissionEnvelope.model_validate(payload)
        except ValidationError as e:
            raise SubmissionFetchError(
                f"Malformed submissions envelope: {e.error_count()} error(s)",
                status_code=status_code,
                error_code="bad_envelope",
            )

        return envelope.submissions.data

    async def submit_signup(self, form: SignupForm) -> None:
        """Post a signup to the hosted form endpoint.

        The response body is not consumed. Redirects are not followed since
        the service redirects the browser to the confirmation page.

        Raises:
            SubmissionWriteError: On network failure or HTTP status >= 400
        """
        async with self._client() as client:
            try:
                response = await client.post(
                    self.form_action,
                    data=form.as_form_data(),
                    follow_redirects=False,
                )
            except httpx.RequestError as e:
                raise SubmissionWriteError(f"Form post failed: {str(e)}")

        if response.status_code >= 400:
            raise SubmissionWriteError(
                f"Form service rejected signup with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        self.logger.info(
            "signup_submitted",
            referral_code=form.referral_code,
            referred_by=form.referred_by or None,
        )
