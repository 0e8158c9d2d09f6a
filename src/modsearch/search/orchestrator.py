"""Multi-file search with bounded concurrency."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Sequence

from modsearch.ingestion.source import FileSource, default_source
from modsearch.models import (
    FileDiagnostic,
    FileHandle,
    FileResult,
    SearchOptions,
    SearchResult,
    handle_for,
)
from modsearch.search.guard import GuardPolicy
from modsearch.search.pattern import Pattern, compile_pattern
from modsearch.search.scanner import scan_file

LOGGER = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 4


@dataclass(slots=True)
class _RunState:
    files: List[FileResult] = field(default_factory=list)
    diagnostics: List[FileDiagnostic] = field(default_factory=list)
    total_matches: int = 0
    cancelled: bool = False

    def add(self, result: FileResult) -> None:
        if result.error is not None:
            self.diagnostics.append(FileDiagnostic(path=result.path, message=result.error))
        if result.matches:
            self.files.append(result)
            self.total_matches += len(result.matches)


class Searcher:
    """Runs a query over a file set, ``concurrency`` files at a time.

    Files are processed in batches: every file of a batch is scanned in
    parallel and the whole batch is merged, in input order, before the next
    one starts. Holds no state between calls.
    """

    def __init__(
        self,
        source: FileSource | None = None,
        *,
        guard: GuardPolicy | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.source = source or default_source()
        self.guard = guard or GuardPolicy()
        self.concurrency = concurrency

    def search(
        self,
        files: Sequence[FileHandle | str],
        options: SearchOptions,
        *,
        cancel: threading.Event | None = None,
    ) -> SearchResult:
        """Search ``files`` for ``options.query``.

        Raises `InvalidPatternError` before touching any file. Setting
        ``cancel`` stops the run at the next file boundary and returns what
        was collected so far.
        """
        started = time.perf_counter()
        pattern = compile_pattern(options)
        handles = [handle_for(item) for item in files]
        LOGGER.info("Searching %d files for %r", len(handles), options.query)

        state = _RunState()
        with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="modsearch-scan") as executor:
            for offset in range(0, len(handles), self.concurrency):
                if cancel is not None and cancel.is_set():
                    state.cancelled = True
                    break

                batch = handles[offset : offset + self.concurrency]
                futures = [executor.submit(self._scan_one, handle, pattern, cancel) for handle in batch]
                # Merge in submission order, not completion order
                for handle, future in zip(batch, futures):
                    try:
                        result = future.result()
                    except Exception as exc:
                        LOGGER.error("Failed to search in file %s: %s", handle.path, exc)
                        result = FileResult(path=handle.path, name=handle.name, error=str(exc))
                    if result is None:
                        state.cancelled = True
                        continue
                    state.add(result)
                LOGGER.debug("Batch %d done, %d files matched so far", offset // self.concurrency + 1, len(state.files))

        elapsed_ms = (time.perf_counter() - started) * 1000
        if state.cancelled:
            LOGGER.info("Search for %r cancelled after %.1fms", options.query, elapsed_ms)
        LOGGER.info(
            "Found %d matches in %d of %d files in %.1fms",
            state.total_matches,
            len(state.files),
            len(handles),
            elapsed_ms,
        )
        return SearchResult(
            query=options.query,
            options=options,
            total_files=len(handles),
            matched_files=len(state.files),
            total_matches=state.total_matches,
            files=tuple(state.files),
            execution_time_ms=round(elapsed_ms, 3),
            diagnostics=tuple(state.diagnostics),
            cancelled=state.cancelled,
        )

    def _scan_one(
        self,
        handle: FileHandle,
        pattern: Pattern,
        cancel: threading.Event | None,
    ) -> FileResult | None:
        if cancel is not None and cancel.is_set():
            return None
        return scan_file(handle, pattern, self.guard, self.source)


def search(
    files: Sequence[FileHandle | str],
    options: SearchOptions,
    *,
    source: FileSource | None = None,
    guard: GuardPolicy | None = None,
    concurrency: int = DEFAULT_CONCURRENCY,
    cancel: threading.Event | None = None,
) -> SearchResult:
    """One-shot search entry point for hosts."""
    searcher = Searcher(source, guard=guard, concurrency=concurrency)
    return searcher.search(files, options, cancel=cancel)
