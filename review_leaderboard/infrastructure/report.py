"""Render the leaderboard and the request accounting as plain text."""
from typing import Iterable, List

from review_leaderboard.domain.models import RateState, UserStats


TITLE = "Code Review Leaderboard"
HEADERS = ("User", "Pull Requests", "Reviews", "Comments", "#Comment Lines")


def format_section(title: str, width: int = 60) -> str:
    """Return a section header."""
    return "\n".join(["", "=" * width, title, "=" * width])


def format_leaderboard(rows: Iterable[UserStats]) -> str:
    """Format one line per user under a header, the user column left aligned."""
    rows = [stats.as_row() for stats in rows]
    user_width = max([len(HEADERS[0])] + [len(row[0]) for row in rows])
    widths = [user_width] + [len(header) for header in HEADERS[1:]]

    lines: List[str] = [format_section(TITLE, width=sum(widths) + 2 * (len(widths) - 1))]
    lines.append("  ".join(
        [f"{HEADERS[0]:<{widths[0]}}"] + [f"{h:>{w}}" for h, w in zip(HEADERS[1:], widths[1:])]
    ))
    lines.append("-" * len(lines[-1]))
    for row in rows:
        lines.append("  ".join(
            [f"{row[0]:<{widths[0]}}"] + [f"{value:>{w},}" for value, w in zip(row[1:], widths[1:])]
        ))
    return "\n".join(lines)


def format_rate_state(rate_state: RateState) -> str:
    remaining = "unknown" if rate_state.remaining is None else rate_state.remaining
    reset = "unknown" if rate_state.reset_at is None else rate_state.reset_at.isoformat()
    return (
        f"{rate_state.total_requests} requests sent to Github\n"
        f"Rate Limit: remaining={remaining} reset={reset}"
    )
