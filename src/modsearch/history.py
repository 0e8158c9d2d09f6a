"""Persisted search history backed by SQLite."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

from modsearch.config import DEFAULT_HISTORY_LIMIT


class SQLiteHistoryStore:
    """Most-recent-first list of past queries, without duplicates."""

    def __init__(self, db_path: Path, *, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.db_path = Path(db_path)
        self.limit = limit
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS search_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    query TEXT NOT NULL UNIQUE,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
                """
            )

    def load(self) -> List[str]:
        rows = self._conn.execute(
            "SELECT query FROM search_history ORDER BY id DESC LIMIT ?",
            (self.limit,),
        ).fetchall()
        return [row["query"] for row in rows]

    def append(self, query: str) -> List[str]:
        """Record ``query`` as the most recent entry and return the history."""
        if not query.strip():
            return self.load()

        with self.transaction() as conn:
            conn.execute("DELETE FROM search_history WHERE query = ?", (query,))
            conn.execute("INSERT INTO search_history (query) VALUES (?)", (query,))
            conn.execute(
                """
                DELETE FROM search_history
                WHERE id NOT IN (
                    SELECT id FROM search_history ORDER BY id DESC LIMIT ?
                )
                """,
                (self.limit,),
            )
        return self.load()

    def clear(self) -> int:
        with self.transaction() as conn:
            cursor = conn.execute("DELETE FROM search_history")
        return cursor.rowcount
