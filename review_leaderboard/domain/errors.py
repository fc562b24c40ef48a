"""Errors that abort a leaderboard crawl.

Rate limiting is absent on purpose: it is absorbed by the transport and
never reaches the domain.
"""


class LeaderboardError(Exception):
    """Base class for every fatal crawl error."""
    pass


class ConfigurationError(LeaderboardError):
    """Raised when options or credentials are missing or invalid."""
    pass


class GitHubAPIError(LeaderboardError):
    """Raised when a GitHub API call fails for a reason other than rate limiting.

    ``status`` is 0 when the request never produced an HTTP response.
    """

    def __init__(self, status: int, url: str, message: str = ""):
        self.status = status
        self.url = url
        self.message = message
        detail = f"HTTP {status}" if status else "request failed"
        super().__init__(f"{detail} for {url}" + (f": {message}" if message else ""))


class TooManyReviewsError(LeaderboardError):
    """Raised when the reviews of a pull request span more than one page."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Found too many reviews in pull request {reference} to handle")
