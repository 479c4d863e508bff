"""Referral system for the waitlist.

- Leaderboard: referral counts per code, ranked by count then signup time
- Codes: short shareable referral codes and links
- Guard: duplicate-email check before signup (fails open)
- Feed: ordered leaderboard refresh cycles
"""

from waitlist.referral.codes import build_referral_link, generate_referral_code
from waitlist.referral.leaderboard import aggregate, filter_entries, summarize
from waitlist.referral.models import LeaderboardEntry, ParsedSubmission

__all__ = [
    "LeaderboardEntry",
    "ParsedSubmission",
    "aggregate",
    "build_referral_link",
    "filter_entries",
    "generate_referral_code",
    "summarize",
]
