"""Tests for database.py - the bounded SQLite history store."""

import sqlite3
import threading

import pytest

from database import Database, HistoryStoreError


@pytest.fixture
def db(tmp_path):
    """Create a Database in a temporary directory."""
    return Database(db_path=str(tmp_path / "history.db"))


class TestDatabaseInit:
    """Tests for table creation and migrations."""

    def test_creates_history_table(self, tmp_path):
        path = tmp_path / "history.db"
        Database(db_path=str(path))

        conn = sqlite3.connect(str(path))
        columns = [row[1] for row in conn.execute("PRAGMA table_info(history)")]
        conn.close()
        assert columns == ["id", "entry", "timestamp"]

    def test_reopening_keeps_entries(self, tmp_path):
        path = str(tmp_path / "history.db")
        Database(db_path=path).add_history("1 + 1 = 2", 12)

        assert Database(db_path=path).get_all_history() == ["1 + 1 = 2"]

    def test_migrates_version_one_table(self, tmp_path, capsys):
        path = str(tmp_path / "history.db")
        conn = sqlite3.connect(path)
        conn.execute(
            "CREATE TABLE history (id INTEGER PRIMARY KEY AUTOINCREMENT, entry TEXT NOT NULL)"
        )
        conn.execute("INSERT INTO history (entry) VALUES ('2 + 2 = 4')")
        conn.execute("INSERT INTO history (entry) VALUES ('3 × 3 = 9')")
        conn.commit()
        conn.close()

        db = Database(db_path=path)

        assert db.get_all_history() == ["3 × 3 = 9", "2 + 2 = 4"]
        assert "Added timestamp column" in capsys.readouterr().out

        conn = sqlite3.connect(path)
        columns = [row[1] for row in conn.execute("PRAGMA table_info(history)")]
        conn.close()
        assert "timestamp" in columns

    def test_unopenable_path_raises(self, tmp_path):
        with pytest.raises(HistoryStoreError):
            Database(db_path=str(tmp_path / "missing" / "history.db"))


class TestAddHistory:
    """Tests for add_history and the trim-to-N policy."""

    def test_newest_first(self, db):
        db.add_history("first", 12)
        db.add_history("second", 12)
        assert db.get_all_history() == ["second", "first"]

    def test_keeps_most_recent_max_items(self, db):
        for i in range(15):
            db.add_history(f"entry {i}", 12)

        entries = db.get_all_history()
        assert len(entries) == 12
        assert entries == [f"entry {i}" for i in range(14, 2, -1)]

    def test_max_items_is_per_call(self, db):
        for i in range(14):
            db.add_history(f"entry {i}", 14)
        assert db.count_history() == 14

        db.add_history("entry 14", 12)
        assert db.count_history() == 12
        assert db.get_all_history()[0] == "entry 14"

    def test_returns_increasing_ids(self, db):
        first = db.add_history("a", 1)
        second = db.add_history("b", 1)
        assert second > first
        assert db.get_all_history() == ["b"]

    def test_rejects_non_positive_max_items(self, db):
        with pytest.raises(ValueError):
            db.add_history("a", 0)

    def test_duplicate_entries_are_kept(self, db):
        db.add_history("1 + 1 = 2", 12)
        db.add_history("1 + 1 = 2", 12)
        assert db.count_history() == 2

    def test_concurrent_appends_respect_bound(self, db):
        def writer(n):
            for i in range(20):
                db.add_history(f"writer {n} entry {i}", 12)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert db.count_history() == 12


class TestClearHistory:
    """Tests for clear_history."""

    def test_clear_then_list_is_empty(self, db):
        db.add_history("a", 12)
        db.add_history("b", 12)
        db.clear_history()
        assert db.get_all_history() == []
        assert db.count_history() == 0

    def test_clear_empty_store(self, db):
        db.clear_history()
        assert db.get_all_history() == []


class TestStoreErrors:
    """Tests that SQLite failures surface as HistoryStoreError."""

    def test_dropped_table_raises(self, tmp_path):
        path = str(tmp_path / "history.db")
        db = Database(db_path=path)
        conn = sqlite3.connect(path)
        conn.execute("DROP TABLE history")
        conn.commit()
        conn.close()

        with pytest.raises(HistoryStoreError):
            db.add_history("a", 12)
        with pytest.raises(HistoryStoreError):
            db.get_all_history()
