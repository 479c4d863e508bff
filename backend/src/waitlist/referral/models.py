"""Referral data model.

Everything here is rebuilt from the raw submissions on each fetch; nothing
is persisted.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ParsedSubmission:
    """A submission whose payload decoded into a record."""

    name: str
    email: str
    referral_code: str  # Code this participant owns
    referred_by: str  # Code this participant claims credit to
    timestamp: datetime | None  # None when created_at could not be parsed


@dataclass(frozen=True)
class LeaderboardEntry:
    """One ranked referral-code owner."""

    name: str
    email: str
    referral_code: str
    referral_count: int
    rank: int
    timestamp: datetime | None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat() if self.timestamp else None
        return data


@dataclass(frozen=True)
class SignupForm:
    """Fields posted to the hosted waitlist form."""

    name: str
    email: str
    referral_code: str
    referred_by: str = ""

    def as_form_data(self) -> dict[str, str]:
        return {
            "name": self.name,
            "email": self.email,
            "referral_code": self.referral_code,
            "referred_by": self.referred_by,
        }


@dataclass(frozen=True)
class SignupSummary:
    """What the confirmation view shows after joining."""

    name: str
    email: str
    referral_code: str
    referral_link: str

    @property
    def share_text(self) -> str:
        who = self.name or "A friend"
        return f"{who} invited you to join the MubXpress waitlist! Sign up here: {self.referral_link}"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["share_text"] = self.share_text
        return data
