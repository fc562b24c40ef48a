"""Rate-limit aware HTTP transport for the GitHub REST API."""
import asyncio
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

import aiohttp
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_never,
)

from review_leaderboard.domain.errors import GitHubAPIError
from review_leaderboard.domain.models import RateState
from review_leaderboard.infrastructure.config import API_VERSION, REQUEST_TIMEOUT, USER_AGENT


logger = logging.getLogger(__name__)

# GitHub asks for at least a minute when it gives no reset time.
DEFAULT_RATE_LIMIT_WAIT = 60.0


class RateLimitExceeded(Exception):
    """Raised when GitHub reports the quota as exhausted.

    Never leaves the transport: the retry loop sleeps ``wait_seconds`` and
    sends the request again.
    """

    def __init__(self, url: str, wait_seconds: float):
        self.url = url
        self.wait_seconds = wait_seconds
        super().__init__(f"Rate limit exhausted for {url}, reset in {wait_seconds:.0f}s")


class RateTracker:
    """Process-wide request counter and last observed rate limit.

    Only touched from the event loop thread, so the increment and the
    snapshot replacement cannot interleave with another task. The rate
    limit values are last-writer-wins across concurrent responses.
    """

    def __init__(self):
        self._total_requests = 0
        self._limit = (None, None)

    def record_request(self) -> None:
        self._total_requests += 1

    def record_rate(self, remaining: int, reset_at: Optional[datetime]) -> None:
        self._limit = (remaining, reset_at)

    def snapshot(self) -> RateState:
        remaining, reset_at = self._limit
        return RateState(total_requests=self._total_requests, remaining=remaining, reset_at=reset_at)


@dataclass(frozen=True)
class ApiResponse:
    """Decoded JSON payload plus the pagination links of the response."""
    payload: Any
    next_page: int = 0
    last_page: int = 0


def wait_for_rate_limit_reset(retry_state) -> float:
    """tenacity wait strategy: sleep until the reset advertised by GitHub."""
    exc = retry_state.outcome.exception()
    return getattr(exc, "wait_seconds", 0.0)


def _header_int(headers: Mapping[str, str], key: str) -> Optional[int]:
    value = (headers.get(key) or "").strip()
    return int(value) if value.isdigit() else None


def _page_of(links, rel: str) -> int:
    """Page number of a Link header relation, 0 when the relation is absent."""
    link = links.get(rel)
    if not link:
        return 0
    page = link.get("url").query.get("page", "")
    return int(page) if page.isdigit() else 0


class RateLimitedTransport:
    """Sends GitHub REST requests, waiting out rate limits transparently.

    Every physical attempt is counted, including the ones answered with a
    rate-limit response. Other HTTP or network failures are raised as
    ``GitHubAPIError`` and never retried.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = REQUEST_TIMEOUT,
        tracker: Optional[RateTracker] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the transport.

        Args:
            base_url: REST API root, e.g. https://api.github.com
            token: Bearer token
            timeout: Total timeout per request in seconds
            tracker: Shared counter, a new one is created when omitted
            sleep: Coroutine used to wait for a rate limit reset
        """
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._tracker = tracker or RateTracker()
        self._sleep = sleep
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def tracker(self) -> RateTracker:
        return self._tracker

    async def _get_session(self) -> aiohttp.ClientSession:
        """Create the HTTP session (lazy initialization, needs a running loop)."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": API_VERSION,
                    "User-Agent": USER_AGENT,
                },
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
        return self._session

    async def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        """Send a request, retrying for as long as GitHub reports rate limiting.

        Raises:
            GitHubAPIError: For any other failure
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RateLimitExceeded),
            wait=wait_for_rate_limit_reset,
            stop=stop_never,
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return await retrying(self._send, method, path, params)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return await self.request("GET", path, params)

    async def _send(self, method: str, path: str, params: Optional[Dict[str, Any]]) -> ApiResponse:
        session = await self._get_session()
        url = f"{self._base_url}{path}"
        self._tracker.record_request()

        try:
            async with session.request(method, url, params=params) as resp:
                self._record_rate(resp.headers)

                if resp.status >= 400:
                    text = await resp.text()
                    wait_seconds = self._rate_limit_wait(resp, text)
                    if wait_seconds is not None:
                        raise RateLimitExceeded(url, wait_seconds)
                    raise GitHubAPIError(resp.status, url, self._error_message(text))

                payload = await resp.json(content_type=None)
                return ApiResponse(
                    payload=payload,
                    next_page=_page_of(resp.links, "next"),
                    last_page=_page_of(resp.links, "last"),
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise GitHubAPIError(0, url, str(e) or type(e).__name__) from e
        except json.JSONDecodeError as e:
            raise GitHubAPIError(0, url, f"malformed JSON response: {e}") from e

    def _record_rate(self, headers: Mapping[str, str]) -> None:
        remaining = _header_int(headers, "X-RateLimit-Remaining")
        if remaining is None:
            return
        reset = _header_int(headers, "X-RateLimit-Reset")
        reset_at = datetime.fromtimestamp(reset, tz=timezone.utc) if reset is not None else None
        self._tracker.record_rate(remaining, reset_at)

    @staticmethod
    def _rate_limit_wait(resp: aiohttp.ClientResponse, text: str) -> Optional[float]:
        """Seconds to wait when the response signals an exhausted quota, else None."""
        if resp.status not in (403, 429):
            return None

        retry_after = _header_int(resp.headers, "Retry-After")
        if retry_after is not None:
            return float(retry_after)

        if _header_int(resp.headers, "X-RateLimit-Remaining") == 0:
            reset = _header_int(resp.headers, "X-RateLimit-Reset")
            if reset is None:
                return DEFAULT_RATE_LIMIT_WAIT
            return max(0.0, reset - time.time()) + 1

        # Secondary limits may come without headers, only with this body text.
        if "secondary rate limit" in text.lower() or "secondary-rate-limits" in text:
            return DEFAULT_RATE_LIMIT_WAIT
        return None

    @staticmethod
    def _error_message(text: str) -> str:
        try:
            body = json.loads(text)
        except ValueError:
            return text[:300]
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return text[:300]

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
