"""Referral leaderboard aggregation.

Turns the flat submission list into ranked entries:

1. Parse payloads (unparseable submissions are dropped)
2. Index owners: referral_code -> owner details, last occurrence wins
3. Count referrals: referred_by -> number of submissions claiming it
4. Join owners with counts (owners without referrals get 0)
5. Sort by count descending, then signup time ascending
6. Rank 1..N over the sorted order
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Sequence

from waitlist.logging_config import get_logger
from waitlist.referral.models import LeaderboardEntry, ParsedSubmission
from waitlist.referral.parser import parse_submissions
from waitlist.submissions.models import RawSubmission

logger = get_logger(__name__)

# Sorts entries without a parseable timestamp after every dated entry
_LATEST = datetime.max.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class _Owner:
    name: str
    email: str
    timestamp: datetime | None


@dataclass(frozen=True)
class LeaderboardStats:
    """Totals shown next to the leaderboard."""

    participants: int
    total_referrals: int
    top_referrer: LeaderboardEntry | None

    def to_dict(self) -> dict:
        return {
            "participants": self.participants,
            "total_referrals": self.total_referrals,
            "top_referrer": self.top_referrer.to_dict() if self.top_referrer else None,
        }


def _sort_key(entry: LeaderboardEntry) -> tuple[int, datetime]:
    return (-entry.referral_count, entry.timestamp or _LATEST)


def aggregate_parsed(submissions: Iterable[ParsedSubmission]) -> list[LeaderboardEntry]:
    """Build the ranked leaderboard from parsed submissions.

    Args:
        submissions: Parsed submissions, in the order the service returned them

    Returns:
        Entries sorted by rank (1-based, contiguous)
    """
    owners: dict[str, _Owner] = {}
    counts: Counter[str] = Counter()

    for submission in submissions:
        if submission.referral_code:
            owners[submission.referral_code] = _Owner(
                name=submission.name,
                email=submission.email,
                timestamp=submission.timestamp,
            )
        if submission.referred_by:
            counts[submission.referred_by] += 1

    unattributed = [code for code in counts if code not in owners]
    if unattributed:
        # TODO: surface these once product decides how orphaned referrals are credited
        logger.debug(
            "referrals_unattributed",
            codes=unattributed,
            referrals=sum(counts[code] for code in unattributed),
        )

    unranked = [
        LeaderboardEntry(
            name=owner.name,
            email=owner.email,
            referral_code=code,
            referral_count=counts.get(code, 0),
            rank=0,
            timestamp=owner.timestamp,
        )
        for code, owner in owners.items()
    ]

    # sorted() is stable, so full ties keep owner insertion order
    ranked = sorted(unranked, key=_sort_key)

    return [
        LeaderboardEntry(
            name=entry.name,
            email=entry.email,
            referral_code=entry.referral_code,
            referral_count=entry.referral_count,
            rank=index + 1,
            timestamp=entry.timestamp,
        )
        for index, entry in enumerate(ranked)
    ]


def aggregate(submissions: Sequence[RawSubmission]) -> list[LeaderboardEntry]:
    """Parse raw submissions and build the ranked leaderboard.

    Total over any input: the empty sequence yields an empty leaderboard and
    unparseable payloads are skipped.
    """
    parsed = parse_submissions(submissions)
    entries = aggregate_parsed(parsed)

    logger.info(
        "leaderboard_built",
        submissions=len(submissions),
        parsed=len(parsed),
        entries=len(entries),
    )
    return entries


def filter_entries(entries: Iterable[LeaderboardEntry], query: str | None) -> list[LeaderboardEntry]:
    """Filter entries by a case-insensitive search over name, email and code.

    Ranks are kept from the full leaderboard, so a filtered view shows each
    participant's real position.
    """
    entries = list(entries)
    needle = (query or "").strip().lower()
    if not needle:
        return entries

    return [
        entry
        for entry in entries
        if needle in entry.name.lower()
        or needle in entry.email.lower()
        or needle in entry.referral_code.lower()
    ]


def summarize(entries: Sequence[LeaderboardEntry]) -> LeaderboardStats:
    """Compute leaderboard totals."""
    return LeaderboardStats(
        participants=len(entries),
        total_referrals=sum(entry.referral_count for entry in entries),
        top_referrer=entries[0] if entries and entries[0].referral_count > 0 else None,
    )
