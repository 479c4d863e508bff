"""Duplicate-email guard run before a signup is posted.

Best effort only: the check and the form post are separate requests, so a
signup landing in between is not seen.
"""

from enum import Enum
from typing import Iterable

from waitlist.errors import SubmissionFetchError
from waitlist.logging_config import get_logger
from waitlist.referral.parser import extract_email
from waitlist.submissions.client import SubmissionClient
from waitlist.submissions.models import RawSubmission

logger = get_logger(__name__)


class DuplicateCheck(str, Enum):
    """Outcome of a duplicate-email check."""

    DUPLICATE = "duplicate"
    NOT_DUPLICATE = "not_duplicate"
    CHECK_FAILED = "check_failed"  # Store unreachable; treated as allowed

    @property
    def allows_signup(self) -> bool:
        return self is not DuplicateCheck.DUPLICATE


def emails_in(submissions: Iterable[RawSubmission]) -> set[str]:
    """Lower-cased emails found in submission payloads."""
    emails = set()
    for submission in submissions:
        email = extract_email(submission)
        if email:
            emails.add(email)
    return emails


class DuplicateEmailGuard:
    """Checks whether an email already joined the waitlist."""

    def __init__(self, client: SubmissionClient):
        self.client = client
        self.logger = get_logger(__name__)

    async def check(self, email: str) -> DuplicateCheck:
        """Check an email against every stored submission (case-insensitive).

        Args:
            email: Email being signed up

        Returns:
            DUPLICATE, NOT_DUPLICATE, or CHECK_FAILED if the store could not be read
        """
        try:
            submissions = await self.client.fetch_submissions()
        except SubmissionFetchError as e:
            self.logger.warning(
                "duplicate_check_failed",
                error=str(e),
                error_code=e.error_code,
            )
            return DuplicateCheck.CHECK_FAILED

        if email.strip().lower() in emails_in(submissions):
            self.logger.info("duplicate_email_detected")
            return DuplicateCheck.DUPLICATE

        return DuplicateCheck.NOT_DUPLICATE
