"""Repository functions for user_achievements table."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from cosmos.db.database import get_db

logger = structlog.get_logger(__name__)


def list_unlocked(user_id: str) -> set[str]:
    """Badge keys persisted for a user."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT badge FROM user_achievements WHERE user_id = ?", (user_id,)
        ).fetchall()
    return {row["badge"] for row in rows}


def list_achievement_rows() -> list[dict[str, str]]:
    """All persisted achievement rows as {user_id, badge}."""
    with get_db() as conn:
        rows = conn.execute("SELECT user_id, badge FROM user_achievements").fetchall()
    return [dict(row) for row in rows]


def insert_unlocked(user_id: str, badges: list[str]) -> None:
    """Persist badges as unlocked; existing rows are left untouched."""
    if not badges:
        return

    now = datetime.now(timezone.utc).isoformat()
    with get_db() as conn:
        conn.executemany(
            """
            INSERT INTO user_achievements (user_id, badge, unlocked_at)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id, badge) DO NOTHING
            """,
            [(user_id, badge, now) for badge in badges],
        )

    logger.debug("achievements.inserted", user_id=user_id, badges=badges)


def delete_unlocked(user_id: str, badges: list[str]) -> None:
    """Remove persisted badges for a user."""
    if not badges:
        return

    with get_db() as conn:
        conn.executemany(
            "DELETE FROM user_achievements WHERE user_id = ? AND badge = ?",
            [(user_id, badge) for badge in badges],
        )

    logger.debug("achievements.deleted", user_id=user_id, badges=badges)
