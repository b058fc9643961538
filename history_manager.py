"""
History Manager for CalDB
Builds history entries and keeps the store bounded
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import config

ENTRY_SEPARATOR = " = "


def build_entry(expression, result):
    """History line: "<expression> = <result>" """
    return f"{expression}{ENTRY_SEPARATOR}{result}"


def expression_from_entry(entry):
    """Raw expression of an entry, without display spaces or commas"""
    expression = entry.rsplit(ENTRY_SEPARATOR, 1)[0]
    return "".join(expression.split()).replace(config.GROUPING_SEPARATOR, "")


def result_from_entry(entry):
    parts = entry.rsplit(ENTRY_SEPARATOR, 1)
    return parts[1] if len(parts) == 2 else ""


class HistoryManager:
    def __init__(self, db, max_items=config.MAX_HISTORY_ITEMS):
        if max_items < 1:
            raise ValueError(f"max_items must be at least 1, got {max_items!r}")
        self.db = db
        self.max_items = max_items
        self._executor_lock = threading.Lock()
        self._executor = None

    def append(self, entry):
        """Add an entry; the oldest ones beyond max_items are dropped"""
        return self.db.add_history(entry, self.max_items)

    def list_all(self):
        """All retained entries, newest first"""
        return self.db.get_all_history()

    def count(self):
        return self.db.count_history()

    def clear(self):
        """Clear all calculation history"""
        self.db.clear_history()

    def append_async(self, entry):
        """Append on the background writer thread; returns a Future.

        Errors from the store are raised by future.result().
        """
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="caldb-history")
            return self._executor.submit(self.append, entry)

    def shutdown(self):
        """Wait for queued appends and stop the writer thread"""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def format_history(self):
        """Numbered entries for display"""
        return [f"{i}. {entry}" for i, entry in enumerate(self.list_all(), 1)]
