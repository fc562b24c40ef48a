"""Domain models representing core business entities."""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, Iterable, Optional, Pattern, Tuple, TypeVar

from review_leaderboard.domain.errors import ConfigurationError


T = TypeVar("T")


def count_lines(body: Optional[str]) -> int:
    """Number of newline-delimited segments in a body; an empty body is one line."""
    return len((body or "").split("\n"))


@dataclass(frozen=True)
class Options:
    """Immutable crawl configuration shared by every stage.

    The repository name pattern is compiled once so that an invalid
    expression fails at start-up rather than in the middle of a crawl.
    """
    since: datetime
    organization: str
    name_pattern: str = ".*"
    _compiled: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            compiled = re.compile(self.name_pattern)
        except re.error as e:
            raise ConfigurationError(
                f"Invalid repository name pattern {self.name_pattern!r}: {e}"
            ) from e
        object.__setattr__(self, "_compiled", compiled)

    def matches(self, repository_name: str) -> bool:
        """Returns True when the repository name matches the name pattern."""
        return self._compiled.search(repository_name) is not None


@dataclass(frozen=True)
class Repository:
    """Immutable domain entity representing a GitHub repository."""
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        """Returns the full repository name (owner/name)."""
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class PullRequest:
    """A pull request of a repository, as listed by the pulls endpoint."""
    repository: Repository
    number: int
    author: str
    updated_at: datetime

    @property
    def reference(self) -> str:
        """Returns the human readable reference (owner/name#number)."""
        return f"{self.repository.full_name}#{self.number}"


@dataclass(frozen=True)
class Review:
    author: str
    body: str
    # Pending reviews have not been submitted yet.
    submitted_at: Optional[datetime]


@dataclass(frozen=True)
class Comment:
    author: str
    body: str
    created_at: datetime


@dataclass(frozen=True)
class StatsDelta:
    """A single observed contribution of one user."""
    user: str
    pull_requests: int = 0
    reviews: int = 0
    comments: int = 0
    comment_lines: int = 0

    @classmethod
    def for_pull_request(cls, user: str) -> "StatsDelta":
        return cls(user=user, pull_requests=1)

    @classmethod
    def for_review(cls, user: str, body: Optional[str]) -> "StatsDelta":
        return cls(user=user, reviews=1, comment_lines=count_lines(body))

    @classmethod
    def for_comment(cls, user: str, body: Optional[str]) -> "StatsDelta":
        return cls(user=user, comments=1, comment_lines=count_lines(body))


@dataclass
class UserStats:
    """Cumulative leaderboard row of a user.

    Only ever grows: every field is the sum of the matching field of all
    deltas added so far.
    """
    user: str
    pull_requests: int = 0
    reviews: int = 0
    comments: int = 0
    comment_lines: int = 0

    def add(self, delta: StatsDelta) -> None:
        self.pull_requests += delta.pull_requests
        self.reviews += delta.reviews
        self.comments += delta.comments
        self.comment_lines += delta.comment_lines

    def as_row(self) -> Tuple[str, int, int, int, int]:
        return (self.user, self.pull_requests, self.reviews, self.comments, self.comment_lines)


@dataclass(frozen=True)
class RateState:
    """Snapshot of the request counter and the last observed rate limit."""
    total_requests: int = 0
    remaining: Optional[int] = None
    reset_at: Optional[datetime] = None


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a paginated list endpoint.

    ``next_page`` is 0 when there is no further page and ``last_page`` is 0
    when the API did not report one (GitHub omits it on the last page).
    """
    items: Tuple[T, ...]
    current_page: int
    next_page: int = 0
    last_page: int = 0

    @classmethod
    def of(cls, items: Iterable[T], current_page: int, next_page: int = 0, last_page: int = 0) -> "Page[T]":
        return cls(tuple(items), current_page, next_page, last_page)
