"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository modules for books, reading progress, click stats
  and unlocked achievements
"""

from cosmos.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
