"""Parallel discovery of an organization's repositories."""
import logging

from review_leaderboard.application.streams import Stream
from review_leaderboard.application.tasks import join_all
from review_leaderboard.domain.github_interface import IGitHubClient
from review_leaderboard.domain.models import Options, Repository


logger = logging.getLogger(__name__)


class RepositoryDiscovery:
    """Lists every repository of an organization with interleaved workers.

    Worker ``i`` (1-indexed) fetches pages ``i, i+W, i+2W, ...`` so the list
    is crawled by W workers at once, each learning the last page from the
    responses it gets.
    """

    def __init__(self, github_client: IGitHubClient, workers: int = 5):
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self._github_client = github_client
        self._workers = workers

    async def discover(self, options: Options, repositories: Stream[Repository]) -> None:
        """Push every repository onto the stream, then close it.

        Any fetch error propagates; the stream is left open in that case
        because the crawl is aborted anyway.
        """
        logger.info(f"Discovering repositories of {options.organization} with {self._workers} workers")
        await join_all([
            self._fetch_pages(options.organization, worker, repositories)
            for worker in range(1, self._workers + 1)
        ])
        await repositories.close()
        logger.info("Repository discovery finished")

    async def _fetch_pages(self, organization: str, worker: int, repositories: Stream[Repository]) -> None:
        logger.debug(f"Spawned repository fetch worker {worker}")
        page = worker
        while True:
            result = await self._github_client.list_repositories(organization, page)
            for repository in result.items:
                await repositories.put(repository)

            page += self._workers
            if page > result.last_page:
                return
