"""Waitlist signup flow."""

from waitlist.errors import DuplicateEmailError
from waitlist.logging_config import get_logger
from waitlist.referral.codes import generate_referral_code
from waitlist.referral.guard import DuplicateCheck, DuplicateEmailGuard
from waitlist.referral.models import SignupForm, SignupSummary
from waitlist.session import ClientSession
from waitlist.submissions.client import SubmissionClient

logger = get_logger(__name__)


class WaitlistService:
    """Joins visitors to the waitlist through the hosted form."""

    def __init__(
        self,
        client: SubmissionClient,
        guard: DuplicateEmailGuard | None = None,
        site_url: str | None = None,
    ):
        """Initialize waitlist service.

        Args:
            client: Form service client used for the signup post
            guard: Duplicate-email guard (defaults to one on the same client)
            site_url: Origin for referral links (defaults to settings)
        """
        self.client = client
        self.guard = guard or DuplicateEmailGuard(client)
        self.site_url = site_url
        self.logger = get_logger(__name__)

    async def join(
        self,
        session: ClientSession,
        name: str,
        email: str,
        referred_by: str | None = None,
    ) -> SignupSummary:
        """Sign a visitor up.

        The signup is remembered in the session before posting, so the
        confirmation view can render even if the post is slow.

        Args:
            session: Visitor's client state
            name: Visitor name
            email: Visitor email
            referred_by: Attribution code (defaults to the session's)

        Returns:
            Summary with the new referral code and shareable link

        Raises:
            DuplicateEmailError: If the email already joined
            SubmissionWriteError: If the form post fails
        """
        name = name.strip()
        email = email.strip()
        if referred_by is None:
            referred_by = session.referred_by
        referred_by = referred_by.strip()

        result = await self.guard.check(email)
        if not result.allows_signup:
            raise DuplicateEmailError(email)
        if result is DuplicateCheck.CHECK_FAILED:
            self.logger.warning("signup_allowed_without_duplicate_check")

        referral_code = generate_referral_code(email)
        session.remember_signup(name=name, email=email, referral_code=referral_code)

        await self.client.submit_signup(
            SignupForm(
                name=name,
                email=email,
                referral_code=referral_code,
                referred_by=referred_by,
            )
        )

        self.logger.info(
            "waitlist_joined",
            referral_code=referral_code,
            referred_by=referred_by or None,
        )

        return session.signup_summary(self.site_url)
