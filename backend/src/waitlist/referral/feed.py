"""Leaderboard refresh cycles.

Each refresh is tagged with an increasing sequence number. A response is
applied only if no newer cycle has been applied already, so a slow, stale
fetch cannot overwrite a fresher leaderboard.
"""

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone

from waitlist.errors import SubmissionFetchError
from waitlist.logging_config import get_logger
from waitlist.referral.leaderboard import aggregate
from waitlist.referral.models import LeaderboardEntry
from waitlist.submissions.client import SubmissionClient

logger = get_logger(__name__)

FETCH_FAILED_MESSAGE = "Unable to load leaderboard. Please try again later."


@dataclass(frozen=True)
class LeaderboardSnapshot:
    """The leaderboard as currently displayed."""

    entries: list[LeaderboardEntry] = field(default_factory=list)
    error: str | None = None
    sequence: int = 0
    fetched_at: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class LeaderboardFeed:
    """Holds the displayed snapshot and applies refresh results in order."""

    def __init__(self, client: SubmissionClient):
        self.client = client
        self._sequence = itertools.count(1)
        self._applied = 0
        self.snapshot = LeaderboardSnapshot()

    async def refresh(self) -> LeaderboardSnapshot:
        """Run one fetch cycle.

        A failed fetch that is applied discards the previous entries.

        Returns:
            The current snapshot once this cycle has finished
        """
        sequence = next(self._sequence)
        logger.debug("leaderboard_refresh_started", sequence=sequence)

        try:
            submissions = await self.client.fetch_submissions()
        except SubmissionFetchError as e:
            logger.error(
                "leaderboard_fetch_failed",
                sequence=sequence,
                error=str(e),
                error_code=e.error_code,
            )
            result = LeaderboardSnapshot(
                error=FETCH_FAILED_MESSAGE,
                sequence=sequence,
                fetched_at=datetime.now(timezone.utc),
            )
        else:
            result = LeaderboardSnapshot(
                entries=aggregate(submissions),
                sequence=sequence,
                fetched_at=datetime.now(timezone.utc),
            )

        self._apply(result)
        return self.snapshot

    def _apply(self, result: LeaderboardSnapshot) -> None:
        if result.sequence <= self._applied:
            logger.info(
                "leaderboard_stale_response_discarded",
                sequence=result.sequence,
                applied=self._applied,
            )
            return

        self._applied = result.sequence
        self.snapshot = result
