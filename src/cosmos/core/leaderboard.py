"""Leaderboard aggregation.

Every board follows the same pattern: group rows by user, reduce to one
number, sort descending with user_id ascending as tie-break, keep the top N.

Boards:
- global: achievements*100 + books*50 + keyword_clicks*2
- daily-pages: pages read on books opened since the start of today (UTC)
- weekly-keywords: glossary clicks in the last 7 days
- badge-sets: completed collector badge sets
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Iterable, Mapping

import structlog

from cosmos.config import load_app_config
from cosmos.core.achievements import completed_collectors
from cosmos.db import (
    achievements_repository,
    books_repository,
    progress_repository,
    stats_repository,
)

if TYPE_CHECKING:
    from cosmos.core.session import Session

logger = structlog.get_logger(__name__)

ACHIEVEMENT_POINTS = 100
BOOK_POINTS = 50
KEYWORD_CLICK_POINTS = 2
LEADERBOARD_SIZE = 10
WEEK = timedelta(days=7)

BOARDS = ("global", "daily-pages", "weekly-keywords", "badge-sets")


class UnknownBoardError(ValueError):
    """Raised for a board name outside BOARDS."""

    def __init__(self, board: str):
        self.board = board
        super().__init__(f"Unknown leaderboard '{board}' (expected one of {', '.join(BOARDS)})")


@dataclass
class LeaderboardEntry:
    """One ranked user."""

    rank: int
    user_id: str
    display_name: str
    score: int
    details: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "user_id": self.user_id,
            "display_name": self.display_name,
            "score": self.score,
            "details": dict(self.details),
        }


def total_score(achievements: int, books: int, keyword_clicks: int) -> int:
    """Composite score of the global leaderboard."""
    return (
        achievements * ACHIEVEMENT_POINTS
        + books * BOOK_POINTS
        + keyword_clicks * KEYWORD_CLICK_POINTS
    )


def display_name(user_id: str, viewer: Session | None = None) -> str:
    """The viewer sees their own email; everyone else is masked."""
    if viewer is not None and viewer.user_id == user_id:
        return viewer.email or "User"
    return f"User {user_id[:8]}"


def _parse_ts(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def start_of_day(now: datetime) -> datetime:
    """Midnight of now's day, in now's timezone."""
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def rank(
    totals: Mapping[str, int],
    viewer: Session | None = None,
    limit: int = LEADERBOARD_SIZE,
    details: Mapping[str, dict[str, int]] | None = None,
) -> list[LeaderboardEntry]:
    """Sort users by score descending, then user_id ascending, and truncate."""
    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))[:limit]
    return [
        LeaderboardEntry(
            rank=position,
            user_id=user_id,
            display_name=display_name(user_id, viewer),
            score=score,
            details=dict((details or {}).get(user_id, {})),
        )
        for position, (user_id, score) in enumerate(ordered, start=1)
    ]


def global_leaderboard(
    stats_rows: Iterable[Mapping[str, Any]],
    achievement_rows: Iterable[Mapping[str, Any]],
    book_rows: Iterable[Mapping[str, Any]],
    viewer: Session | None = None,
    limit: int = LEADERBOARD_SIZE,
) -> list[LeaderboardEntry]:
    """Composite ranking from three independently fetched row sets.

    Args:
        stats_rows: {user_id, keyword_clicks} per user
        achievement_rows: one {user_id} row per unlocked badge
        book_rows: one {user_id} row per book
    """
    counts: dict[str, dict[str, int]] = defaultdict(
        lambda: {"achievements": 0, "books": 0, "keyword_clicks": 0}
    )

    # Every input seeds users, not only stats rows
    for row in stats_rows:
        counts[row["user_id"]]["keyword_clicks"] += int(row.get("keyword_clicks") or 0)
    for row in achievement_rows:
        counts[row["user_id"]]["achievements"] += 1
    for row in book_rows:
        counts[row["user_id"]]["books"] += 1

    totals = {
        user_id: total_score(c["achievements"], c["books"], c["keyword_clicks"])
        for user_id, c in counts.items()
    }
    return rank(totals, viewer, limit, details=counts)


def daily_pages_leaderboard(
    progress_rows: Iterable[Mapping[str, Any]],
    now: datetime,
    viewer: Session | None = None,
    limit: int = LEADERBOARD_SIZE,
) -> list[LeaderboardEntry]:
    """Sum pages_read over progress rows touched since the start of today."""
    since = start_of_day(now)
    totals: dict[str, int] = defaultdict(int)
    for row in progress_rows:
        if _parse_ts(row["last_read_at"]) >= since:
            totals[row["user_id"]] += int(row.get("pages_read") or 0)
    return rank(totals, viewer, limit)


def weekly_keywords_leaderboard(
    click_events: Iterable[Mapping[str, Any]],
    now: datetime,
    viewer: Session | None = None,
    limit: int = LEADERBOARD_SIZE,
) -> list[LeaderboardEntry]:
    """Count glossary clicks in the seven days up to now."""
    since = now - WEEK
    totals: dict[str, int] = defaultdict(int)
    for row in click_events:
        if _parse_ts(row["clicked_at"]) >= since:
            totals[row["user_id"]] += 1
    return rank(totals, viewer, limit)


def badge_sets_leaderboard(
    achievement_rows: Iterable[Mapping[str, Any]],
    viewer: Session | None = None,
    limit: int = LEADERBOARD_SIZE,
) -> list[LeaderboardEntry]:
    """Rank users by the number of collector badge sets they completed."""
    badges: dict[str, set[str]] = defaultdict(set)
    for row in achievement_rows:
        badges[row["user_id"]].add(row["badge"])

    totals = {user_id: completed_collectors(owned) for user_id, owned in badges.items()}
    totals = {user_id: n for user_id, n in totals.items() if n > 0}
    return rank(totals, viewer, limit)


def load_leaderboard(
    board: str,
    viewer: Session | None = None,
    now: datetime | None = None,
    limit: int | None = None,
) -> list[LeaderboardEntry]:
    """Fetch rows from the database and build a board.

    The board size defaults to reader.leaderboard_size from the app config.

    Raises:
        UnknownBoardError: If board is not one of BOARDS
    """
    now = now or datetime.now(timezone.utc)
    limit = limit or load_app_config().reader.leaderboard_size

    if board == "global":
        stats_rows = [
            {"user_id": s.user_id, "keyword_clicks": s.keyword_clicks}
            for s in stats_repository.list_all_stats()
        ]
        entries = global_leaderboard(
            stats_rows,
            achievements_repository.list_achievement_rows(),
            books_repository.list_book_owners(),
            viewer,
            limit,
        )
    elif board == "daily-pages":
        since = start_of_day(now).astimezone(timezone.utc).isoformat()
        rows = [vars(p) for p in progress_repository.list_progress_since(since)]
        entries = daily_pages_leaderboard(rows, now, viewer, limit)
    elif board == "weekly-keywords":
        since = (now - WEEK).astimezone(timezone.utc).isoformat()
        entries = weekly_keywords_leaderboard(
            stats_repository.list_click_events_since(since), now, viewer, limit
        )
    elif board == "badge-sets":
        entries = badge_sets_leaderboard(
            achievements_repository.list_achievement_rows(), viewer, limit
        )
    else:
        raise UnknownBoardError(board)

    logger.debug("leaderboard.loaded", board=board, entries=len(entries))
    return entries
