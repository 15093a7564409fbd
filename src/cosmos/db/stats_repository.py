"""Repository functions for user_stats and keyword_click_events tables.

Counters are incremented in a single statement at the database, so
concurrent clicks from several clients never lose an update.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from cosmos.db.database import get_db

logger = structlog.get_logger(__name__)

COUNTERS = frozenset(
    {"keyword_clicks", "hubble_clicks", "chandra_clicks", "jwst_clicks"}
)


@dataclass
class StatsRecord:
    """Per-user glossary interaction counters."""

    user_id: str
    keyword_clicks: int = 0
    hubble_clicks: int = 0
    chandra_clicks: int = 0
    jwst_clicks: int = 0
    updated_at: str = ""


class UnknownCounterError(ValueError):
    """Raised when incrementing a counter that doesn't exist."""

    def __init__(self, counter: str):
        self.counter = counter
        super().__init__(f"Unknown counter: {counter}")


def get_stats(user_id: str) -> StatsRecord | None:
    """Get a user's counters, or None if the user never clicked a term."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM user_stats WHERE user_id = ?", (user_id,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def increment(user_id: str, counter: str, delta: int = 1) -> None:
    """Atomically add delta to one counter, creating the row if absent.

    Raises:
        UnknownCounterError: If counter is not a known column
    """
    if counter not in COUNTERS:
        raise UnknownCounterError(counter)

    now = datetime.now(timezone.utc).isoformat()

    # Column name is whitelisted above
    with get_db() as conn:
        conn.execute(
            f"""
            INSERT INTO user_stats (user_id, {counter}, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                {counter} = {counter} + excluded.{counter},
                updated_at = excluded.updated_at
            """,
            (user_id, delta, now),
        )

    logger.debug("stats.incremented", user_id=user_id, counter=counter, delta=delta)


def list_all_stats() -> list[StatsRecord]:
    """All users' counters."""
    with get_db() as conn:
        rows = conn.execute("SELECT * FROM user_stats").fetchall()
    return [_row_to_record(row) for row in rows]


def log_click_event(user_id: str, keyword: str, clicked_at: str | None = None) -> None:
    """Append a glossary click to the event log."""
    with get_db() as conn:
        conn.execute(
            "INSERT INTO keyword_click_events (user_id, keyword, clicked_at) VALUES (?, ?, ?)",
            (user_id, keyword, clicked_at or datetime.now(timezone.utc).isoformat()),
        )


def list_click_events_since(since: str) -> list[dict[str, str]]:
    """Click events at or after an ISO timestamp."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT user_id, keyword, clicked_at FROM keyword_click_events WHERE clicked_at >= ?",
            (since,),
        ).fetchall()
    return [dict(row) for row in rows]


def _row_to_record(row) -> StatsRecord:
    return StatsRecord(
        user_id=row["user_id"],
        keyword_clicks=row["keyword_clicks"],
        hubble_clicks=row["hubble_clicks"],
        chandra_clicks=row["chandra_clicks"],
        jwst_clicks=row["jwst_clicks"],
        updated_at=row["updated_at"],
    )
