"""
Database Manager for CalDB
Handles SQLite storage for the bounded calculation history
"""
import sqlite3
import threading
from datetime import datetime

import config


class HistoryStoreError(Exception):
    """Raised when the history database cannot be read or written"""


class Database:
    def __init__(self, db_path=config.DB_PATH):
        self.db_path = db_path
        self._lock = threading.Lock()
        self.init_database()

    def get_connection(self):
        """Create and return a database connection"""
        try:
            return sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise HistoryStoreError(f"Cannot open history database {self.db_path}: {e}") from e

    def _run(self, work):
        """Run work(cursor) in one transaction, serialized with other writers"""
        with self._lock:
            conn = self.get_connection()
            try:
                result = work(conn.cursor())
                conn.commit()
                return result
            except sqlite3.Error as e:
                conn.rollback()
                raise HistoryStoreError(str(e)) from e
            finally:
                conn.close()

    def init_database(self):
        """Initialize the history table and migrate older layouts"""
        def work(cursor):
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    entry TEXT NOT NULL,
                    timestamp TEXT DEFAULT ''
                )
            ''')

            # Migration: version 1 files have no timestamp column
            cursor.execute("PRAGMA table_info(history)")
            columns = [column[1] for column in cursor.fetchall()]
            if 'timestamp' not in columns:
                cursor.execute("ALTER TABLE history ADD COLUMN timestamp TEXT DEFAULT ''")
                print("Database migrated: Added timestamp column to history")

        self._run(work)

    def add_history(self, entry, max_items):
        """Add an entry and keep only the max_items most recent"""
        if max_items < 1:
            raise ValueError(f"max_items must be at least 1, got {max_items!r}")
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        def work(cursor):
            cursor.execute('INSERT INTO history (entry, timestamp) VALUES (?, ?)',
                           (entry, timestamp))
            entry_id = cursor.lastrowid
            cursor.execute('''
                DELETE FROM history WHERE id NOT IN
                (SELECT id FROM history ORDER BY id DESC LIMIT ?)
            ''', (max_items,))
            return entry_id

        return self._run(work)

    def get_all_history(self):
        """Retrieve all entries, newest first"""
        def work(cursor):
            cursor.execute('SELECT entry FROM history ORDER BY id DESC')
            return [row[0] for row in cursor.fetchall()]

        return self._run(work)

    def count_history(self):
        def work(cursor):
            cursor.execute('SELECT COUNT(*) FROM history')
            return cursor.fetchone()[0]

        return self._run(work)

    def clear_history(self):
        """Clear calculation history"""
        self._run(lambda cursor: cursor.execute('DELETE FROM history'))
