"""Configuration constants and credential lookup for the leaderboard crawler."""
import logging
import os
import shutil
import subprocess
from typing import Optional

from dotenv import load_dotenv

from review_leaderboard.domain.errors import ConfigurationError


# Load environment variables from .env or env file
load_dotenv('.env') or load_dotenv('env')


logger = logging.getLogger(__name__)

DEFAULT_HOST = "github.com"
USER_AGENT = "review-leaderboard/1.0"
API_VERSION = "2022-11-28"

DISCOVERY_WORKERS = int(os.getenv("DISCOVERY_WORKERS", "5"))
MAX_CONCURRENT_REPOSITORIES = int(os.getenv("MAX_CONCURRENT_REPOSITORIES", "8"))
STREAM_CAPACITY = int(os.getenv("STREAM_CAPACITY", "128"))
PER_PAGE = min(int(os.getenv("PER_PAGE", "100")), 100)  # GitHub max is 100
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def get_log_level() -> int:
    """Map LOG_LEVEL to a logging level, defaulting to INFO."""
    return LOG_LEVELS.get(os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO)


def get_host() -> str:
    return os.getenv("GH_HOST") or DEFAULT_HOST


def api_base_url(host: str) -> str:
    """REST API root for github.com or a GitHub Enterprise Server host."""
    if host == DEFAULT_HOST:
        return "https://api.github.com"
    return f"https://{host}/api/v3"


def _token_from_gh_cli(host: str) -> Optional[str]:
    if shutil.which("gh") is None:
        return None
    try:
        result = subprocess.run(
            ["gh", "auth", "token", "--hostname", host],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"gh auth token failed: {e}")
        return None
    if result.returncode == 0 and result.stdout.strip():
        return result.stdout.strip()
    return None


def get_token(host: str) -> str:
    """Resolve the bearer token for a host.

    Looks at GH_TOKEN, GITHUB_TOKEN and finally the GitHub CLI's credential
    store.

    Raises:
        ConfigurationError: When no token is found
    """
    token = os.getenv("GH_TOKEN") or os.getenv("GITHUB_TOKEN") or _token_from_gh_cli(host)
    if not token:
        raise ConfigurationError(f"authentication token not found for host {host}")
    return token
