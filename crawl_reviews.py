"""Main entry point for the code review leaderboard.

Parses the command line, runs the crawl through the application service and
prints the leaderboard.
"""
import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from review_leaderboard.application.crawler_service import CrawlerService
from review_leaderboard.domain.errors import LeaderboardError
from review_leaderboard.domain.models import Options
from review_leaderboard.infrastructure import config
from review_leaderboard.infrastructure.github_client import GitHubRestClient
from review_leaderboard.infrastructure.progress import TqdmProgressReporter
from review_leaderboard.infrastructure.report import format_leaderboard, format_rate_state
from review_leaderboard.infrastructure.transport import RateLimitedTransport


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=config.get_log_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def parse_date(value: str) -> datetime:
    """Parse YYYY-MM-DD as midnight UTC."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD")


def default_since() -> str:
    last_week = datetime.now(timezone.utc) - timedelta(days=7)
    return last_week.strftime("%Y-%m-%d")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Leaderboard of pull requests, reviews and review comments per user "
                    "across the repositories of a GitHub organization."
    )
    parser.add_argument("--org", required=True, help="Github organization to scan")
    parser.add_argument("--name", default=".*", help="Regex pattern to match the repository name")
    parser.add_argument("--since", type=parse_date, default=default_since(),
                        help="only count activity after this date (YYYY-MM-DD, default: 7 days ago)")
    parser.add_argument("--workers", type=int, default=config.DISCOVERY_WORKERS,
                        help="parallel repository list workers")
    parser.add_argument("--max-repositories", type=int, default=config.MAX_CONCURRENT_REPOSITORIES,
                        help="repositories scanned at the same time")
    args = parser.parse_args(argv)
    if not args.org.strip():
        parser.error("Please provide an Github organization name with --org")
    if args.workers < 1:
        parser.error("--workers must be at least 1")
    if args.max_repositories < 1:
        parser.error("--max-repositories must be at least 1")
    return args


async def main(argv: Optional[List[str]] = None) -> int:
    """Execute the crawl and print the leaderboard. Returns the exit status."""
    args = parse_args(argv)
    progress = TqdmProgressReporter()
    crawler = None

    try:
        options = Options(since=args.since, organization=args.org, name_pattern=args.name)
        host = config.get_host()
        transport = RateLimitedTransport(config.api_base_url(host), config.get_token(host))
        crawler = CrawlerService(
            github_client=GitHubRestClient(transport),
            discovery_workers=args.workers,
            max_concurrent_repositories=args.max_repositories,
            stream_capacity=config.STREAM_CAPACITY,
            progress=progress,
        )

        result = await crawler.crawl(options)
    except LeaderboardError as e:
        logger.error(f"Crawl failed: {e}")
        return 1
    except Exception as e:
        logger.error(f"Crawl failed: {e}", exc_info=True)
        return 1
    finally:
        progress.close()
        if crawler is not None:
            await crawler.close()

    print(format_rate_state(result.rate_state))
    print(format_leaderboard(result.leaderboard()))
    return 0


def run() -> None:
    configure_logging()
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
