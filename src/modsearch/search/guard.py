"""Per-file limits that keep scanning memory-bounded."""

from __future__ import annotations

from dataclasses import dataclass

from modsearch.ingestion.source import DEFAULT_CHUNK_BYTES
from modsearch.models import TRUNCATION_LINE_NUMBER, MatchContext, MatchRecord, Segment

DEFAULT_MAX_MATCHES = 1000
DEFAULT_LARGE_FILE_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class GuardPolicy:
    """Match cap and large-file threshold applied to every scanned file.

    Files above ``large_file_bytes`` are read in ``chunk_bytes`` pieces
    instead of all at once; the match cap applies to every file.
    """

    max_matches: int = DEFAULT_MAX_MATCHES
    large_file_bytes: int = DEFAULT_LARGE_FILE_BYTES
    chunk_bytes: int = DEFAULT_CHUNK_BYTES

    def __post_init__(self) -> None:
        if self.max_matches < 1:
            raise ValueError("max_matches must be at least 1")
        if self.large_file_bytes < 0:
            raise ValueError("large_file_bytes must not be negative")
        if self.chunk_bytes < 1:
            raise ValueError("chunk_bytes must be at least 1")

    def is_large(self, size: int) -> bool:
        return size > self.large_file_bytes

    def limit_reached(self, match_count: int) -> bool:
        return match_count >= self.max_matches

    def truncation_marker(self) -> MatchRecord:
        notice = f"... results limited to the first {self.max_matches} matches to save memory ..."
        return MatchRecord(
            line_number=TRUNCATION_LINE_NUMBER,
            line=notice,
            segments=(Segment(notice, False),),
            context=MatchContext(),
            is_limit_warning=True,
        )
