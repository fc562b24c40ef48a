"""Pull request scanning and review activity extraction."""
import asyncio
import logging
from typing import Optional

from review_leaderboard.application.streams import Stream
from review_leaderboard.application.tasks import cancel_all, join_all
from review_leaderboard.domain.errors import TooManyReviewsError
from review_leaderboard.domain.github_interface import IGitHubClient
from review_leaderboard.domain.models import Options, PullRequest, Repository, StatsDelta
from review_leaderboard.domain.progress_interface import IProgressReporter


logger = logging.getLogger(__name__)


class ActivityCollector:
    """Turns repositories into a stream of per-user statistics deltas.

    Repositories are processed concurrently up to ``max_concurrent_repositories``.
    Inside a repository, the pull requests of one page are processed
    concurrently and joined before the next page is requested.
    """

    def __init__(
        self,
        github_client: IGitHubClient,
        max_concurrent_repositories: int = 8,
        progress: Optional[IProgressReporter] = None,
    ):
        """Initialize the collector.

        Args:
            github_client: GitHub API client implementation
            max_concurrent_repositories: Upper bound of repositories scanned at once
            progress: Receives per-repository page progress
        """
        if max_concurrent_repositories < 1:
            raise ValueError("max_concurrent_repositories must be at least 1")
        self._github_client = github_client
        self._max_concurrent_repositories = max_concurrent_repositories
        self._progress = progress or IProgressReporter()

    async def process_repositories(
        self,
        options: Options,
        repositories: Stream[Repository],
        stats: Stream[StatsDelta],
    ) -> None:
        """Scan every matching repository from the stream, then close the stats stream."""
        semaphore = asyncio.Semaphore(self._max_concurrent_repositories)

        async def _bounded(repository: Repository) -> None:
            async with semaphore:
                await self.process_repository(options, repository, stats)

        # Tasks already spawned must not outlive a failure or cancellation.
        tasks = []
        try:
            async for repository in repositories:
                if options.matches(repository.name):
                    tasks.append(asyncio.ensure_future(_bounded(repository)))
                else:
                    logger.debug(f"Skipping repository {repository.full_name}")

            logger.info(f"Scanning {len(tasks)} matching repositories")
            await asyncio.gather(*tasks)
        except BaseException:
            await cancel_all(tasks)
            raise
        await stats.close()

    async def process_repository(
        self,
        options: Options,
        repository: Repository,
        stats: Stream[StatsDelta],
    ) -> None:
        """Scan all pull request pages of a repository, newest update first."""
        logger.debug(f"Fetching pull requests of {repository.full_name}")
        page = 1
        while True:
            result = await self._github_client.list_pull_requests(repository, page)
            if page == 1:
                self._progress.repository_started(repository, result.last_page or 1)

            await join_all([
                self.process_pull_request(options, pull_request, stats)
                for pull_request in result.items
                if pull_request.updated_at > options.since
            ])
            self._progress.page_processed(repository)

            if result.next_page == 0:
                self._progress.repository_finished(repository)
                return
            page = result.next_page

    async def process_pull_request(
        self,
        options: Options,
        pull_request: PullRequest,
        stats: Stream[StatsDelta],
    ) -> None:
        """Emit the deltas of a pull request, its reviews and its comments.

        Raises:
            TooManyReviewsError: When the reviews do not fit in a single page
        """
        await stats.put(StatsDelta.for_pull_request(pull_request.author))

        logger.debug(f"Fetching reviews of {pull_request.reference}")
        reviews = await self._github_client.list_reviews(pull_request)
        if reviews.next_page != 0:
            raise TooManyReviewsError(pull_request.reference)

        for review in reviews.items:
            if review.submitted_at is not None and review.submitted_at > options.since:
                await stats.put(StatsDelta.for_review(review.author, review.body))

        logger.debug(f"Fetching comments of {pull_request.reference}")
        page = 1
        while True:
            comments = await self._github_client.list_comments(pull_request, page)
            for comment in comments.items:
                if comment.created_at > options.since:
                    await stats.put(StatsDelta.for_comment(comment.author, comment.body))

            if comments.next_page == 0:
                return
            page = comments.next_page
