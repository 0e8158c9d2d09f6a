"""Application configuration defaults."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from modsearch.search.guard import DEFAULT_LARGE_FILE_BYTES, DEFAULT_MAX_MATCHES, GuardPolicy
from modsearch.search.orchestrator import DEFAULT_CONCURRENCY

DEFAULT_HISTORY_LIMIT = 10


def _get_default_history_path() -> Path:
    """Get the default history database path based on execution context."""
    user_db = Path.home() / "Documents" / "ModSearch" / "history.db"

    if getattr(sys, "frozen", False):
        return user_db

    # When running from source, prefer local data/ if it exists
    local_db = Path("data/history.db")
    if local_db.exists():
        return local_db

    return user_db


@dataclass(slots=True)
class AppConfig:
    history_path: Path | None = None
    max_matches_per_file: int = DEFAULT_MAX_MATCHES
    large_file_bytes: int = DEFAULT_LARGE_FILE_BYTES
    concurrency: int = DEFAULT_CONCURRENCY
    history_limit: int = DEFAULT_HISTORY_LIMIT

    def __post_init__(self) -> None:
        if self.history_path is None:
            self.history_path = _get_default_history_path()

    def resolve_history_path(self, base_dir: Path | None = None) -> Path:
        if self.history_path is None:
            self.history_path = _get_default_history_path()
        if Path(self.history_path).is_absolute() or base_dir is None:
            return Path(self.history_path)
        return base_dir / self.history_path

    def guard_policy(self) -> GuardPolicy:
        return GuardPolicy(
            max_matches=self.max_matches_per_file,
            large_file_bytes=self.large_file_bytes,
        )
