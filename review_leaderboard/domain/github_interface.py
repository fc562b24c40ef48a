"""GitHub API interface (port) for fetching review activity.

This is the anti-corruption layer that shields the domain from GitHub API specifics.
"""
from abc import ABC, abstractmethod
from review_leaderboard.domain.models import Comment, Page, PullRequest, RateState, Repository, Review


class IGitHubClient(ABC):
    """Abstract interface for GitHub API operations.

    Page numbers are 1-indexed. Implementations absorb rate limiting and raise
    ``LeaderboardError`` subclasses for anything else.
    """

    @abstractmethod
    async def list_repositories(self, organization: str, page: int) -> Page[Repository]:
        """Fetch one page of an organization's repositories."""
        pass

    @abstractmethod
    async def list_pull_requests(self, repository: Repository, page: int) -> Page[PullRequest]:
        """Fetch one page of pull requests, most recently updated first.

        Args:
            repository: Repository to list
            page: Page number to fetch
        """
        pass

    @abstractmethod
    async def list_reviews(self, pull_request: PullRequest) -> Page[Review]:
        """Fetch the first page of reviews at the maximum page size."""
        pass

    @abstractmethod
    async def list_comments(self, pull_request: PullRequest, page: int) -> Page[Comment]:
        """Fetch one page of review comments of a pull request."""
        pass

    @abstractmethod
    def rate_state(self) -> RateState:
        """Requests issued so far and the last observed rate limit."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
