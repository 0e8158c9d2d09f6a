"""File statistics for listing UIs, computed without running a search."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

from modsearch.ingestion.reader import count_lines, read_lines
from modsearch.ingestion.source import FileSource, default_source
from modsearch.models import FileStat, handle_for
from modsearch.search.guard import GuardPolicy

LOGGER = logging.getLogger(__name__)


def compute_file_stat(
    path: str,
    source: FileSource | None = None,
    *,
    guard: GuardPolicy | None = None,
) -> FileStat:
    """Return size, line count, encoding and mtime for ``path``.

    Raises ``OSError`` when the file cannot be read.
    """
    source = source or default_source()
    guard = guard or GuardPolicy()
    path = handle_for(path).path
    metadata = source.metadata(path)
    decoded = read_lines(path, source, guard)
    return FileStat(
        path=path,
        size=metadata.size,
        line_count=count_lines(decoded.lines),
        encoding=decoded.encoding,
        modified_at=metadata.modified_at,
    )


def compute_file_stats(
    paths: Sequence[str],
    source: FileSource | None = None,
    *,
    guard: GuardPolicy | None = None,
    concurrency: int = 4,
) -> List[FileStat]:
    """Batched `compute_file_stat`, in input order.

    Unreadable files are logged and left out of the result rather than
    returned as placeholder rows with an "Unknown" encoding, so every entry
    describes a file that was actually read. Callers listing a file set can
    compare paths to find the ones that are missing.
    """
    source = source or default_source()
    guard = guard or GuardPolicy()
    stats: List[FileStat] = []
    with ThreadPoolExecutor(max_workers=max(1, concurrency)) as executor:
        futures = [executor.submit(compute_file_stat, path, source, guard=guard) for path in paths]
        for path, future in zip(paths, futures):
            try:
                stats.append(future.result())
            except (OSError, UnicodeError, LookupError) as exc:
                LOGGER.warning("Failed to get file stats for %s: %s", path, exc)
    return stats
