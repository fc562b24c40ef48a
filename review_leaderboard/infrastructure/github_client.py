"""GitHub REST API client implementation on top of the rate-limited transport."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from review_leaderboard.domain.errors import GitHubAPIError
from review_leaderboard.domain.github_interface import IGitHubClient
from review_leaderboard.domain.models import (
    Comment,
    Page,
    PullRequest,
    RateState,
    Repository,
    Review,
)
from review_leaderboard.infrastructure.config import PER_PAGE
from review_leaderboard.infrastructure.transport import ApiResponse, RateLimitedTransport


logger = logging.getLogger(__name__)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse GitHub's ISO 8601 timestamps (``2024-01-01T12:00:00Z``)."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _login(node: Dict[str, Any]) -> str:
    # Deleted accounts come back as a null user.
    return (node.get("user") or {}).get("login") or "ghost"


class GitHubRestClient(IGitHubClient):
    """GitHub REST API client.

    Implements the IGitHubClient port, providing an anti-corruption layer
    between the domain and GitHub's JSON payloads.
    """

    def __init__(self, transport: RateLimitedTransport, per_page: int = PER_PAGE):
        """Initialize GitHub client.

        Args:
            transport: Rate-limited transport used for every request
            per_page: Page size of list endpoints (max 100)
        """
        self._transport = transport
        self._per_page = min(per_page, 100)  # GitHub max is 100

    async def _get_list(self, path: str, params: Dict[str, Any]) -> ApiResponse:
        response = await self._transport.get(path, params)
        if not isinstance(response.payload, list):
            raise GitHubAPIError(0, path, f"expected a JSON list, got {type(response.payload).__name__}")
        return response

    async def list_repositories(self, organization: str, page: int) -> Page[Repository]:
        response = await self._get_list(
            f"/orgs/{organization}/repos",
            {"page": page, "per_page": self._per_page},
        )
        repositories: List[Repository] = []
        for node in response.payload:
            owner = (node.get("owner") or {}).get("login") or organization
            repositories.append(Repository(owner=owner, name=node["name"]))
        return Page.of(repositories, page, response.next_page, response.last_page)

    async def list_pull_requests(self, repository: Repository, page: int) -> Page[PullRequest]:
        response = await self._get_list(
            f"/repos/{repository.owner}/{repository.name}/pulls",
            {
                "state": "all",
                "sort": "updated",
                "direction": "desc",
                "page": page,
                "per_page": self._per_page,
            },
        )
        pull_requests = [
            PullRequest(
                repository=repository,
                number=node["number"],
                author=_login(node),
                updated_at=parse_timestamp(node["updated_at"]),
            )
            for node in response.payload
        ]
        return Page.of(pull_requests, page, response.next_page, response.last_page)

    async def list_reviews(self, pull_request: PullRequest) -> Page[Review]:
        repository = pull_request.repository
        response = await self._get_list(
            f"/repos/{repository.owner}/{repository.name}/pulls/{pull_request.number}/reviews",
            {"page": 1, "per_page": 100},
        )
        reviews = [
            Review(
                author=_login(node),
                body=node.get("body") or "",
                submitted_at=parse_timestamp(node.get("submitted_at")),
            )
            for node in response.payload
        ]
        return Page.of(reviews, 1, response.next_page, response.last_page)

    async def list_comments(self, pull_request: PullRequest, page: int) -> Page[Comment]:
        repository = pull_request.repository
        response = await self._get_list(
            f"/repos/{repository.owner}/{repository.name}/pulls/{pull_request.number}/comments",
            {"page": page, "per_page": self._per_page},
        )
        comments = [
            Comment(
                author=_login(node),
                body=node.get("body") or "",
                created_at=parse_timestamp(node["created_at"]),
            )
            for node in response.payload
        ]
        return Page.of(comments, page, response.next_page, response.last_page)

    async def get_rate_limit(self) -> Dict[str, Any]:
        """Fetch the core REST quota (``GET /rate_limit``, not counted against it)."""
        response = await self._transport.get("/rate_limit")
        return (response.payload or {}).get("resources", {}).get("core", {})

    def rate_state(self) -> RateState:
        return self._transport.tracker.snapshot()

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()
