"""Waitlist API v1 endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel, Field, field_validator

from waitlist.api.deps import (
    get_client_session,
    get_waitlist_service,
    write_session_cookies,
)
from waitlist.api.rate_limit import signup_limit
from waitlist.errors import DuplicateEmailError, SubmissionWriteError
from waitlist.logging_config import get_logger
from waitlist.session import ClientSession
from waitlist.signup.service import WaitlistService

logger = get_logger(__name__)

router = APIRouter(prefix="/waitlist", tags=["waitlist"])


# ==================== MODELS ====================


def _validate_email(value: str) -> str:
    value = value.strip()
    if "@" not in value or value.startswith("@"):
        raise ValueError("Enter a valid email address")
    return value


class JoinRequest(BaseModel):
    """Request to join the waitlist."""
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=254)
    referred_by: str | None = Field(default=None, max_length=50)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def email_has_at(cls, v: str) -> str:
        return _validate_email(v)


class CheckEmailRequest(BaseModel):
    """Request to check an email against the waitlist."""
    email: str = Field(min_length=3, max_length=254)

    @field_validator("email")
    @classmethod
    def email_has_at(cls, v: str) -> str:
        return _validate_email(v)


class CheckEmailResponse(BaseModel):
    """Result of a duplicate-email check."""
    email: str
    result: str
    allowed: bool


class ReferralResponse(BaseModel):
    """Attribution code currently in effect."""
    referred_by: str


class SummaryResponse(BaseModel):
    """Confirmation data after joining."""
    name: str
    email: str
    referral_code: str
    referral_link: str
    share_text: str


# ==================== ENDPOINTS ====================


@router.get("/referral", response_model=ReferralResponse)
async def capture_referral(
    response: Response,
    ref: str | None = Query(default=None, max_length=50),
    session: ClientSession = Depends(get_client_session),
):
    """Record the ``ref`` link parameter, or return the stored attribution.

    Called when someone lands on the site, e.g. ``/?ref=JANE7QX2MF3K``.
    """
    referred_by = session.capture_referral(ref)
    write_session_cookies(response, session)
    return ReferralResponse(referred_by=referred_by)


@router.delete("/referral", response_model=ReferralResponse)
async def clear_referral(
    response: Response,
    session: ClientSession = Depends(get_client_session),
):
    """Forget the stored attribution code."""
    session.clear_referral()
    write_session_cookies(response, session)
    return ReferralResponse(referred_by="")


@router.post("/check-email", response_model=CheckEmailResponse)
async def check_email(
    body: CheckEmailRequest,
    service: WaitlistService = Depends(get_waitlist_service),
):
    """Check whether an email already joined.

    A failed check reports ``check_failed`` and still allows the signup.
    """
    result = await service.guard.check(body.email)
    return CheckEmailResponse(
        email=body.email,
        result=result.value,
        allowed=result.allows_signup,
    )


@router.post("", response_model=SummaryResponse, status_code=status.HTTP_201_CREATED)
@signup_limit
async def join_waitlist(
    request: Request,
    response: Response,
    body: JoinRequest,
    session: ClientSession = Depends(get_client_session),
    service: WaitlistService = Depends(get_waitlist_service),
):
    """Join the waitlist.

    Uses ``referred_by`` from the body, else the stored attribution cookie.
    """
    try:
        summary = await service.join(
            session,
            name=body.name,
            email=body.email,
            referred_by=body.referred_by,
        )
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except SubmissionWriteError as e:
        logger.error("waitlist_join_failed", error=str(e), status_code=e.status_code)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Unable to join the waitlist right now. Please try again.",
        )

    write_session_cookies(response, session)
    return SummaryResponse(**summary.to_dict())


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(session: ClientSession = Depends(get_client_session)):
    """Confirmation data for the visitor's last signup."""
    summary = session.signup_summary()
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No signup found for this session",
        )
    return SummaryResponse(**summary.to_dict())
