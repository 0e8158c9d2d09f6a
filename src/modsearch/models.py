"""Core ModSearch data models."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Tuple

TRUNCATION_LINE_NUMBER = -1


@dataclass(frozen=True, slots=True)
class FileHandle:
    """A file selected, dropped or discovered by the host."""

    path: str
    name: str
    is_file: bool = True

    @classmethod
    def from_path(cls, path: str | os.PathLike[str], *, is_file: bool = True) -> FileHandle:
        normalized = os.path.normpath(os.fspath(path))
        return cls(path=normalized, name=os.path.basename(normalized), is_file=is_file)


@dataclass(frozen=True, slots=True)
class FileMetadata:
    size: int
    modified_at: datetime


@dataclass(frozen=True, slots=True)
class FileStat:
    """Size, line count and encoding of a file, computed on demand."""

    path: str
    size: int
    line_count: int
    encoding: str
    modified_at: datetime


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """User-facing match options for one search run."""

    query: str
    case_sensitive: bool = False
    whole_word: bool = False
    use_regex: bool = False


@dataclass(frozen=True, slots=True)
class Segment:
    """Slice of a line, flagged when it belongs to a match."""

    text: str
    is_match: bool


@dataclass(frozen=True, slots=True)
class MatchContext:
    before: str | None = None
    after: str | None = None


@dataclass(frozen=True, slots=True)
class MatchRecord:
    """One matched line with its highlight segments and neighbouring lines."""

    line_number: int
    line: str
    segments: Tuple[Segment, ...]
    context: MatchContext = field(default_factory=MatchContext)
    is_limit_warning: bool = False


@dataclass(frozen=True, slots=True)
class FileResult:
    """Matches found in a single file, in ascending line order."""

    path: str
    name: str
    matches: Tuple[MatchRecord, ...] = ()
    error: str | None = None

    @property
    def truncated(self) -> bool:
        return any(match.is_limit_warning for match in self.matches)


@dataclass(frozen=True, slots=True)
class FileDiagnostic:
    path: str
    message: str


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Aggregated outcome of a search run over a file set."""

    query: str
    options: SearchOptions
    total_files: int
    matched_files: int
    total_matches: int
    files: Tuple[FileResult, ...]
    execution_time_ms: float
    diagnostics: Tuple[FileDiagnostic, ...] = ()
    cancelled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def handle_for(item: FileHandle | str | os.PathLike[str]) -> FileHandle:
    """Accept either a ready handle or a raw path."""
    if isinstance(item, FileHandle):
        return item
    return FileHandle.from_path(Path(item))
