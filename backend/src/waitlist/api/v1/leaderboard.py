"""Leaderboard API v1 endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from waitlist.api.deps import get_feed
from waitlist.logging_config import get_logger
from waitlist.referral.feed import LeaderboardFeed
from waitlist.referral.leaderboard import filter_entries, summarize

logger = get_logger(__name__)

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("")
async def get_leaderboard(
    search: str | None = Query(default=None, max_length=100, description="Filter by name, email or code"),
    feed: LeaderboardFeed = Depends(get_feed),
):
    """Fetch submissions and return the ranked referral leaderboard.

    Every call is a fresh fetch cycle. Stats cover the full leaderboard;
    ``entries`` is narrowed by ``search`` while keeping real ranks.
    """
    snapshot = await feed.refresh()

    if not snapshot.ok:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=snapshot.error,
        )

    entries = filter_entries(snapshot.entries, search)

    return {
        "entries": [entry.to_dict() for entry in entries],
        "stats": summarize(snapshot.entries).to_dict(),
        "sequence": snapshot.sequence,
        "fetched_at": snapshot.fetched_at.isoformat() if snapshot.fetched_at else None,
    }
