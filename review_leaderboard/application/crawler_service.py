"""Crawler service orchestrating the leaderboard crawl."""
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from review_leaderboard.application.activity import ActivityCollector
from review_leaderboard.application.aggregator import StatsAggregator
from review_leaderboard.application.discovery import RepositoryDiscovery
from review_leaderboard.application.streams import Stream
from review_leaderboard.application.tasks import join_all
from review_leaderboard.domain.github_interface import IGitHubClient
from review_leaderboard.domain.models import Options, RateState, Repository, StatsDelta, UserStats
from review_leaderboard.domain.progress_interface import IProgressReporter


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrawlResult:
    """Outcome of a crawl: the totals per user and the request accounting."""
    stats_per_user: Dict[str, UserStats]
    rate_state: RateState
    duration_seconds: float

    def leaderboard(self) -> List[UserStats]:
        """Users ordered by pull requests, reviews, comments and comment lines."""
        return sorted(
            self.stats_per_user.values(),
            key=lambda s: (-s.pull_requests, -s.reviews, -s.comments, -s.comment_lines, s.user),
        )


class CrawlerService:
    """Application service for computing the code review leaderboard.

    Runs discovery, repository scanning and aggregation concurrently; the
    stages are connected by bounded streams.
    """

    def __init__(
        self,
        github_client: IGitHubClient,
        discovery_workers: int = 5,
        max_concurrent_repositories: int = 8,
        stream_capacity: int = 128,
        progress: Optional[IProgressReporter] = None,
    ):
        """Initialize crawler service.

        Args:
            github_client: GitHub API client implementation
            discovery_workers: Number of interleaved repository list workers
            max_concurrent_repositories: Repositories scanned at the same time
            stream_capacity: Capacity of the streams between stages
            progress: Receives per-repository progress
        """
        self._github_client = github_client
        self._stream_capacity = stream_capacity
        self._discovery = RepositoryDiscovery(github_client, workers=discovery_workers)
        self._collector = ActivityCollector(
            github_client,
            max_concurrent_repositories=max_concurrent_repositories,
            progress=progress,
        )
        self._aggregator = StatsAggregator()

    async def crawl(self, options: Options) -> CrawlResult:
        """Crawl the organization and aggregate review activity per user.

        Any error aborts the whole crawl and is raised to the caller.
        """
        start_time = time.time()
        logger.info(
            f"Processing data since {options.since:%Y-%m-%d} matching repository "
            f"name pattern {options.name_pattern}"
        )

        repositories: Stream[Repository] = Stream(self._stream_capacity)
        stats: Stream[StatsDelta] = Stream(self._stream_capacity)

        _, _, stats_per_user = await join_all([
            self._discovery.discover(options, repositories),
            self._collector.process_repositories(options, repositories, stats),
            self._aggregator.aggregate(stats),
        ])

        duration = time.time() - start_time
        rate_state = self._github_client.rate_state()
        logger.info(
            f"Crawl completed: {len(stats_per_user)} users, "
            f"{rate_state.total_requests} requests in {duration:.2f} seconds"
        )
        return CrawlResult(stats_per_user=stats_per_user, rate_state=rate_state, duration_seconds=duration)

    async def close(self) -> None:
        """Close connections."""
        await self._github_client.close()
