"""Shared dependencies for API routes."""

from urllib.parse import quote, unquote

from fastapi import Request, Response

from waitlist.referral.feed import LeaderboardFeed
from waitlist.session import DURABLE_KEYS, PAGE_KEYS, ClientSession
from waitlist.signup.service import WaitlistService
from waitlist.submissions.client import SubmissionClient

# Attribution cookie lives for a year; signup cookies end with the browser session
DURABLE_COOKIE_MAX_AGE = 365 * 24 * 3600


def get_submission_client() -> SubmissionClient:
    return SubmissionClient()


def get_feed(request: Request) -> LeaderboardFeed:
    """The app-wide feed holding the displayed leaderboard snapshot."""
    return request.app.state.feed


def get_waitlist_service() -> WaitlistService:
    return WaitlistService(get_submission_client())


def _read_cookies(request: Request, keys: tuple[str, ...]) -> dict[str, str]:
    cookies = request.cookies
    return {key: unquote(cookies[key]) for key in keys if key in cookies}


def get_client_session(request: Request) -> ClientSession:
    """Build the visitor's ClientSession from request cookies."""
    return ClientSession(
        durable=_read_cookies(request, DURABLE_KEYS),
        page=_read_cookies(request, PAGE_KEYS),
    )


def write_session_cookies(response: Response, session: ClientSession) -> None:
    """Mirror the ClientSession back into cookies.

    Values are percent-encoded: Set-Cookie headers must stay Latin-1, while
    names and referral codes can be any text.
    """
    for key in DURABLE_KEYS:
        if key in session.durable:
            response.set_cookie(
                key,
                quote(session.durable[key], safe=""),
                max_age=DURABLE_COOKIE_MAX_AGE,
                httponly=True,
                samesite="lax",
            )
        else:
            response.delete_cookie(key)

    for key in PAGE_KEYS:
        if key in session.page:
            response.set_cookie(key, quote(session.page[key], safe=""), httponly=True, samesite="lax")
