"""Per-file line scanning."""

from __future__ import annotations

import logging
from typing import Iterable, List

from modsearch.ingestion.reader import read_lines
from modsearch.ingestion.source import FileSource, default_source
from modsearch.models import FileHandle, FileResult, MatchContext, MatchRecord
from modsearch.search.guard import GuardPolicy
from modsearch.search.pattern import Pattern

LOGGER = logging.getLogger(__name__)

_END = object()


def scan_lines(lines: Iterable[str], pattern: Pattern, guard: GuardPolicy) -> List[MatchRecord]:
    """Collect match records from ``lines``, stopping at the guard's cap.

    Keeps one line of look-behind and one of look-ahead for context, so the
    input can be a lazy stream of any length.
    """
    records: List[MatchRecord] = []
    iterator = iter(lines)
    previous: str | None = None
    current = next(iterator, _END)
    line_number = 0

    while current is not _END:
        line_number += 1
        following = next(iterator, _END)
        segments = pattern.segments(current)
        if segments:
            records.append(
                MatchRecord(
                    line_number=line_number,
                    line=current,
                    segments=segments,
                    context=MatchContext(
                        before=previous,
                        after=None if following is _END else following,
                    ),
                )
            )
            if guard.limit_reached(len(records)):
                records.append(guard.truncation_marker())
                break
        previous = current
        current = following

    return records


def scan_file(
    handle: FileHandle,
    pattern: Pattern,
    guard: GuardPolicy,
    source: FileSource | None = None,
) -> FileResult:
    """Scan one file. Read failures yield an empty result carrying ``error``."""
    source = source or default_source()
    try:
        decoded = read_lines(handle.path, source, guard)
        records = scan_lines(decoded.lines, pattern, guard)
    except (OSError, UnicodeError, LookupError) as exc:
        LOGGER.warning("Failed to search in file %s: %s", handle.path, exc)
        return FileResult(path=handle.path, name=handle.name, error=str(exc) or type(exc).__name__)

    if records and records[-1].is_limit_warning:
        LOGGER.warning("Matches in %s limited to %d", handle.path, guard.max_matches)
    return FileResult(path=handle.path, name=handle.name, matches=tuple(records))
