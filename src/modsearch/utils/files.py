"""Utility helpers for working with files."""

from __future__ import annotations

import logging
import os
from typing import Iterable, Iterator, List, Tuple

from modsearch.ingestion.source import FileSource, default_source
from modsearch.models import FileHandle

LOGGER = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = frozenset(
    {"sp", "cfg", "ini", "txt", "vmt", "qc", "inc", "lua", "log", "vdf", "scr"}
)


def is_supported(file_name: str) -> bool:
    """Check the lowercased extension of ``file_name`` against the allow-list."""
    _, extension = os.path.splitext(file_name)
    return extension[1:].lower() in SUPPORTED_EXTENSIONS


def partition_supported(handles: Iterable[FileHandle]) -> Tuple[List[FileHandle], List[FileHandle]]:
    """Split handles into (accepted, rejected) by extension."""
    accepted: List[FileHandle] = []
    rejected: List[FileHandle] = []
    for handle in handles:
        (accepted if is_supported(handle.name) else rejected).append(handle)
    return accepted, rejected


def _walk(directory: str, source: FileSource) -> Iterator[FileHandle]:
    try:
        children = source.list_directory(directory)
    except OSError as exc:
        LOGGER.warning("Failed to read directory %s: %s", directory, exc)
        return

    for child in children:
        try:
            is_dir = source.is_dir(child)
        except OSError as exc:
            LOGGER.warning("Failed to inspect %s: %s", child, exc)
            continue
        if is_dir:
            yield from _walk(child, source)
        elif source.is_file(child):
            yield FileHandle.from_path(child)


def discover(root_paths: Iterable[str | os.PathLike[str]], source: FileSource | None = None) -> Iterator[FileHandle]:
    """Yield every regular file under the given roots, descending into directories.

    Extensions are not checked here; hosts apply `is_supported` so they can
    report what they rejected. An unreadable directory is logged and skipped
    without affecting its siblings.
    """
    source = source or default_source()
    for root in root_paths:
        path = os.path.normpath(os.fspath(root))
        try:
            if source.is_dir(path):
                found = 0
                for handle in _walk(path, source):
                    found += 1
                    yield handle
                LOGGER.info("Discovered %d files under %s", found, path)
            elif source.is_file(path):
                yield FileHandle.from_path(path)
            else:
                LOGGER.warning("Skipping %s: not a file or directory", path)
        except OSError as exc:
            LOGGER.warning("Failed to inspect %s: %s", path, exc)
