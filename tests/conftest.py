"""Shared fixtures: an in-memory GitHub client implementing the port."""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from review_leaderboard.domain.github_interface import IGitHubClient
from review_leaderboard.domain.models import (
    Comment,
    Page,
    PullRequest,
    RateState,
    Repository,
    Review,
)


SINCE = datetime(2024, 3, 1, tzinfo=timezone.utc)


def at(day: int, hour: int = 12) -> datetime:
    """A timestamp in March 2024, after SINCE for any day >= 1 and hour > 0."""
    return datetime(2024, 3, day, hour, tzinfo=timezone.utc)


def _page(pages: Sequence[Sequence], page: int) -> Page:
    """Slice canned pages the way GitHub paginates.

    The last page and out-of-range pages carry no ``last`` link.
    """
    total = len(pages)
    items = pages[page - 1] if 1 <= page <= total else []
    has_next = page < total
    return Page.of(items, page, page + 1 if has_next else 0, total if has_next else 0)


class FakeGitHubClient(IGitHubClient):
    """Serves canned pages and records every call as (endpoint, key, page)."""

    def __init__(
        self,
        repository_pages: Sequence[Sequence[Repository]] = (),
        pull_request_pages: Optional[Dict[str, Sequence[Sequence[PullRequest]]]] = None,
        reviews: Optional[Dict[str, Sequence[Review]]] = None,
        comment_pages: Optional[Dict[str, Sequence[Sequence[Comment]]]] = None,
        paged_reviews: Sequence[str] = (),
    ):
        self.repository_pages = repository_pages
        self.pull_request_pages = pull_request_pages or {}
        self.reviews = reviews or {}
        self.comment_pages = comment_pages or {}
        self.paged_reviews = set(paged_reviews)
        self.calls: List[Tuple[str, str, int]] = []
        self.closed = False

    async def list_repositories(self, organization: str, page: int) -> Page[Repository]:
        self.calls.append(("repos", organization, page))
        return _page(self.repository_pages, page)

    async def list_pull_requests(self, repository: Repository, page: int) -> Page[PullRequest]:
        self.calls.append(("pulls", repository.full_name, page))
        return _page(self.pull_request_pages.get(repository.full_name, [[]]), page)

    async def list_reviews(self, pull_request: PullRequest) -> Page[Review]:
        self.calls.append(("reviews", pull_request.reference, 1))
        next_page = 2 if pull_request.reference in self.paged_reviews else 0
        return Page.of(self.reviews.get(pull_request.reference, []), 1, next_page, next_page)

    async def list_comments(self, pull_request: PullRequest, page: int) -> Page[Comment]:
        self.calls.append(("comments", pull_request.reference, page))
        return _page(self.comment_pages.get(pull_request.reference, [[]]), page)

    def rate_state(self) -> RateState:
        return RateState(total_requests=len(self.calls), remaining=4000, reset_at=at(2))

    async def close(self) -> None:
        self.closed = True

    def pages_requested(self, endpoint: str, key: str) -> List[int]:
        return [page for name, k, page in self.calls if name == endpoint and k == key]
