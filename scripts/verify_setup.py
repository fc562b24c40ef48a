"""Verify that the setup is correct before running the leaderboard crawl."""
import asyncio
import os
import sys
from datetime import datetime, timezone

from review_leaderboard.domain.errors import LeaderboardError
from review_leaderboard.infrastructure import config
from review_leaderboard.infrastructure.github_client import GitHubRestClient
from review_leaderboard.infrastructure.transport import RateLimitedTransport


def check_log_level():
    """Check LOG_LEVEL holds a recognized value."""
    print("Checking environment variables...")

    value = os.getenv("LOG_LEVEL")
    if value and value.strip().upper() not in config.LOG_LEVELS:
        print(f"⚠️  LOG_LEVEL={value} is not recognized, INFO will be used")
    else:
        print(f"✅ LOG_LEVEL: {value or 'INFO'}")
    print(f"   GH_HOST: {config.get_host()}")
    return True


def check_github_token():
    """Verify a token resolves for the configured host."""
    print("\nChecking GitHub token...")

    try:
        token = config.get_token(config.get_host())
    except LeaderboardError as e:
        print(f"❌ {e}")
        return False

    print("✅ GitHub token found")
    print(f"   Token prefix: {token[:10]}...")
    return True


async def _fetch_rate_limit():
    host = config.get_host()
    client = GitHubRestClient(RateLimitedTransport(config.api_base_url(host), config.get_token(host)))
    try:
        return await client.get_rate_limit()
    finally:
        await client.close()


def check_api_access():
    """Call GET /rate_limit with the token and report the remaining quota."""
    print("\nChecking GitHub API access...")

    try:
        core = asyncio.run(_fetch_rate_limit())
    except LeaderboardError as e:
        print(f"❌ Failed to reach the GitHub API: {e}")
        return False

    reset = core.get("reset")
    reset_at = datetime.fromtimestamp(reset, tz=timezone.utc).isoformat() if reset else "unknown"
    print("✅ GitHub API reachable")
    print(f"   Rate limit: remaining={core.get('remaining')}/{core.get('limit')} reset={reset_at}")
    return True


def main():
    """Run all verification checks."""
    print("=" * 60)
    print("Code Review Leaderboard - Setup Verification")
    print("=" * 60)

    checks = [
        ("Environment Variables", check_log_level),
        ("GitHub Token", check_github_token),
        ("GitHub API Access", check_api_access),
    ]

    results = {}
    for name, check_func in checks:
        results[name] = check_func()
        if not results[name]:
            break

    print("\n" + "=" * 60)
    print("Verification Summary")
    print("=" * 60)

    for name, passed in results.items():
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"{status}: {name}")

    if len(results) == len(checks) and all(results.values()):
        print("\n✅ All checks passed! Ready to run the crawler.")
        print("\nNext steps:")
        print("  python crawl_reviews.py --org <organization>")
        sys.exit(0)
    else:
        print("\n❌ Some checks failed. Please fix the issues above.")
        print("\nCommon solutions:")
        print("  - Set GH_TOKEN: export GH_TOKEN=your_token")
        print("  - Or log in with the GitHub CLI: gh auth login")
        sys.exit(1)


if __name__ == "__main__":
    main()
