"""Tests for achievement evaluation and cache resync."""

from cosmos.core.achievements import (
    BADGES,
    COLLECTOR_BADGES,
    UserCounts,
    completed_collectors,
    earned_keys,
    evaluate,
    is_earned,
    load_counts,
    sync_unlocked_achievements,
)
from cosmos.core.glossary import record_term_click
from cosmos.db import achievements_repository, books_repository, stats_repository


def _add_books(user_id: str, n: int) -> list:
    return [
        books_repository.insert_book(
            user_id=user_id, title=f"Book {i}", book_type="pdf", total_pages=10
        )
        for i in range(n)
    ]


class TestEvaluate:
    """Tests for pure badge evaluation."""

    def test_threshold_inclusive(self):
        assert is_earned(5, 5)
        assert not is_earned(4, 5)

    def test_no_books_no_badges(self):
        assert earned_keys(UserCounts()) == set()

    def test_first_book_unlocks_only_reader(self):
        assert earned_keys(UserCounts(book_count=1)) == {"reader"}

    def test_library_thresholds(self):
        assert earned_keys(UserCounts(book_count=5)) == {"reader", "scholar"}
        assert earned_keys(UserCounts(book_count=10)) == {
            "reader",
            "scholar",
            "master",
            "library-collector",
        }

    def test_keyword_thresholds(self):
        assert earned_keys(UserCounts(keyword_clicks=9)) == set()
        assert earned_keys(UserCounts(keyword_clicks=25)) == {"keyword-bronze", "keyword-silver"}

    def test_telescope_badges_and_collector(self):
        counts = UserCounts(hubble_clicks=1, chandra_clicks=2, jwst_clicks=1)
        assert earned_keys(counts) == {
            "hubble-explorer",
            "chandra-explorer",
            "jwst-explorer",
            "telescope-collector",
        }

    def test_monotonic_in_counts(self):
        """More of any count never loses a badge."""
        previous: set[str] = set()
        for n in range(0, 60, 3):
            current = earned_keys(UserCounts(book_count=n, keyword_clicks=n))
            assert previous <= current
            previous = current

    def test_progress_is_capped_at_target(self):
        statuses = {s.key: s for s in evaluate(UserCounts(book_count=7))}

        assert statuses["reader"].progress == 1
        assert statuses["scholar"].earned
        assert statuses["master"].progress == 7
        assert statuses["master"].target == 10
        assert statuses["library-collector"].progress == 2

    def test_every_badge_evaluated(self):
        assert len(evaluate(UserCounts())) == len(BADGES) + len(COLLECTOR_BADGES)

    def test_completed_collectors(self):
        assert completed_collectors({"reader", "scholar"}) == 0
        assert completed_collectors({"reader", "scholar", "master"}) == 1


class TestDatabaseCounts:
    """Tests for counts and cache sync against SQLite."""

    def test_load_counts(self, db_path, session):
        _add_books(session.user_id, 2)
        record_term_click(session.user_id, "Hubble")

        counts = load_counts(session.user_id)
        assert counts.book_count == 2
        assert counts.keyword_clicks == 1
        assert counts.hubble_clicks == 1

    def test_load_counts_for_new_user(self, db_path, session):
        assert load_counts(session.user_id) == UserCounts()

    def test_sync_adds_and_removes(self, db_path, session):
        (book,) = _add_books(session.user_id, 1)

        added, removed = sync_unlocked_achievements(session.user_id)
        assert added == ["reader"]
        assert removed == []
        assert achievements_repository.list_unlocked(session.user_id) == {"reader"}

        books_repository.delete_book(book.id, session.user_id)
        added, removed = sync_unlocked_achievements(session.user_id)
        assert added == []
        assert removed == ["reader"]
        assert achievements_repository.list_unlocked(session.user_id) == set()

    def test_sync_is_idempotent(self, db_path, session):
        _add_books(session.user_id, 1)
        sync_unlocked_achievements(session.user_id)
        assert sync_unlocked_achievements(session.user_id) == ([], [])

    def test_sync_scoped_to_user(self, db_path, session, other_session):
        _add_books(session.user_id, 1)
        stats_repository.increment(other_session.user_id, "keyword_clicks", 10)

        sync_unlocked_achievements(session.user_id)
        sync_unlocked_achievements(other_session.user_id)

        assert achievements_repository.list_unlocked(session.user_id) == {"reader"}
        assert achievements_repository.list_unlocked(other_session.user_id) == {
            "keyword-bronze"
        }
