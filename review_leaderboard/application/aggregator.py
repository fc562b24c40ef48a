"""Fan-in of statistics deltas into per-user totals."""
import logging
from typing import Dict, Iterable, Optional

from review_leaderboard.application.streams import Stream
from review_leaderboard.domain.models import StatsDelta, UserStats


logger = logging.getLogger(__name__)


def accumulate(deltas: Iterable[StatsDelta], totals: Optional[Dict[str, UserStats]] = None) -> Dict[str, UserStats]:
    """Fold deltas into per-user totals; the order of the deltas does not matter."""
    if totals is None:
        totals = {}
    for delta in deltas:
        add_delta(totals, delta)
    return totals


def add_delta(totals: Dict[str, UserStats], delta: StatsDelta) -> None:
    user_stats = totals.get(delta.user)
    if user_stats is None:
        user_stats = totals[delta.user] = UserStats(user=delta.user)
    user_stats.add(delta)


class StatsAggregator:
    """Sole consumer of the statistics stream and sole owner of the totals."""

    async def aggregate(self, stats: Stream[StatsDelta]) -> Dict[str, UserStats]:
        """Drain the stream until it is closed and return the totals per user."""
        totals: Dict[str, UserStats] = {}
        received = 0
        async for delta in stats:
            add_delta(totals, delta)
            received += 1
        logger.info(f"Aggregated {received} contributions from {len(totals)} users")
        return totals
