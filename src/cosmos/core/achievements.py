"""Achievement evaluation.

Badges are derived from current counts every time they are shown. The
user_achievements table is only a display cache and is resynchronised
from the derived values by ``sync_unlocked_achievements``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from cosmos.db import achievements_repository, books_repository, stats_repository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Badge:
    """A threshold badge driven by one counter."""

    key: str
    title: str
    family: str
    metric: str
    threshold: int
    description: str


@dataclass(frozen=True)
class CollectorBadge:
    """Earned when every member badge is earned."""

    key: str
    title: str
    members: tuple[str, ...]
    description: str


@dataclass
class UserCounts:
    """Counts that drive badge evaluation."""

    book_count: int = 0
    keyword_clicks: int = 0
    hubble_clicks: int = 0
    chandra_clicks: int = 0
    jwst_clicks: int = 0


@dataclass
class BadgeStatus:
    """Evaluated badge for display."""

    key: str
    title: str
    family: str
    description: str
    earned: bool
    progress: int
    target: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "family": self.family,
            "description": self.description,
            "earned": self.earned,
            "progress": self.progress,
            "target": self.target,
        }


BADGES: tuple[Badge, ...] = (
    Badge("reader", "Mission Apollo 1", "library", "book_count", 1, "Add your first book"),
    Badge("scholar", "Mission Apollo 2", "library", "book_count", 5, "Add 5 books to the library"),
    Badge("master", "Mission Apollo 3", "library", "book_count", 10, "Add 10 books to the library"),
    Badge("keyword-bronze", "Keyword Explorer Bronze", "keywords", "keyword_clicks", 10, "Click 10 keywords"),
    Badge("keyword-silver", "Keyword Explorer Silver", "keywords", "keyword_clicks", 25, "Click 25 keywords"),
    Badge("keyword-gold", "Keyword Explorer Gold", "keywords", "keyword_clicks", 50, "Click 50 keywords"),
    Badge("hubble-explorer", "Hubble Explorer", "telescope", "hubble_clicks", 1, "Explore a Hubble keyword"),
    Badge("chandra-explorer", "Chandra Explorer", "telescope", "chandra_clicks", 1, "Explore a Chandra keyword"),
    Badge("jwst-explorer", "Webb Explorer", "telescope", "jwst_clicks", 1, "Explore a James Webb keyword"),
)

COLLECTOR_BADGES: tuple[CollectorBadge, ...] = (
    CollectorBadge(
        "library-collector",
        "Library Commander",
        ("reader", "scholar", "master"),
        "Earn every library mission badge",
    ),
    CollectorBadge(
        "keyword-collector",
        "Keyword Commander",
        ("keyword-bronze", "keyword-silver", "keyword-gold"),
        "Earn every keyword explorer badge",
    ),
    CollectorBadge(
        "telescope-collector",
        "Great Observatories",
        ("hubble-explorer", "chandra-explorer", "jwst-explorer"),
        "Explore keywords from all three telescopes",
    ),
)


def is_earned(count: int, threshold: int) -> bool:
    """A threshold badge is earned once the count reaches it."""
    return count >= threshold


def evaluate(counts: UserCounts) -> list[BadgeStatus]:
    """Evaluate all threshold and collector badges for a set of counts."""
    statuses: list[BadgeStatus] = []
    earned: set[str] = set()

    for badge in BADGES:
        value = getattr(counts, badge.metric)
        ok = is_earned(value, badge.threshold)
        if ok:
            earned.add(badge.key)
        statuses.append(
            BadgeStatus(
                key=badge.key,
                title=badge.title,
                family=badge.family,
                description=badge.description,
                earned=ok,
                progress=min(value, badge.threshold),
                target=badge.threshold,
            )
        )

    for collector in COLLECTOR_BADGES:
        have = sum(1 for m in collector.members if m in earned)
        statuses.append(
            BadgeStatus(
                key=collector.key,
                title=collector.title,
                family="collector",
                description=collector.description,
                earned=have == len(collector.members),
                progress=have,
                target=len(collector.members),
            )
        )

    return statuses


def earned_keys(counts: UserCounts) -> set[str]:
    """Keys of every earned badge."""
    return {s.key for s in evaluate(counts) if s.earned}


def completed_collectors(earned: set[str]) -> int:
    """Number of collector sets whose members are all in ``earned``."""
    return sum(1 for c in COLLECTOR_BADGES if all(m in earned for m in c.members))


def load_counts(user_id: str) -> UserCounts:
    """Read the driving counts for a user from the database."""
    stats = stats_repository.get_stats(user_id)
    counts = UserCounts(book_count=books_repository.count_books(user_id))
    if stats is not None:
        counts.keyword_clicks = stats.keyword_clicks
        counts.hubble_clicks = stats.hubble_clicks
        counts.chandra_clicks = stats.chandra_clicks
        counts.jwst_clicks = stats.jwst_clicks
    return counts


def sync_unlocked_achievements(user_id: str) -> tuple[list[str], list[str]]:
    """Make persisted badge rows mirror the derived badges.

    Returns:
        (added, removed) badge keys
    """
    derived = earned_keys(load_counts(user_id))
    stored = achievements_repository.list_unlocked(user_id)

    added = sorted(derived - stored)
    removed = sorted(stored - derived)
    achievements_repository.insert_unlocked(user_id, added)
    achievements_repository.delete_unlocked(user_id, removed)

    if added or removed:
        logger.info("achievements.synced", user_id=user_id, added=added, removed=removed)

    return added, removed
