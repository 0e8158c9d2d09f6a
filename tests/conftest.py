"""Shared test fixtures."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Dict, Iterable, Iterator, List

import pytest

from modsearch.models import FileMetadata


class MemorySource:
    """In-memory FileSource that records how files were accessed."""

    def __init__(self, files: Dict[str, bytes] | None = None, *, unreadable: Iterable[str] = ()) -> None:
        self.files = dict(files or {})
        self.unreadable = set(unreadable)
        self.calls: List[str] = []
        self.chunks_read = 0
        self._lock = threading.Lock()

    def _check(self, path: str, call: str) -> None:
        with self._lock:
            self.calls.append(f"{call}:{path}")
        if path in self.unreadable:
            raise PermissionError(f"Permission denied: {path}")
        if path not in self.files:
            raise FileNotFoundError(f"No such file: {path}")

    def read_bytes(self, path: str) -> bytes:
        self._check(path, "read")
        return self.files[path]

    def iter_chunks(self, path: str, chunk_size: int = 65536) -> Iterator[bytes]:
        self._check(path, "chunks")
        data = self.files[path]
        for start in range(0, len(data), chunk_size):
            with self._lock:
                self.chunks_read += 1
            yield data[start : start + chunk_size]

    def metadata(self, path: str) -> FileMetadata:
        self._check(path, "metadata")
        return FileMetadata(size=len(self.files[path]), modified_at=datetime(2024, 1, 1, 12, 0))

    def list_directory(self, path: str) -> List[str]:
        prefix = path.rstrip("/") + "/"
        children = {prefix + name[len(prefix) :].split("/")[0] for name in self.files if name.startswith(prefix)}
        if not children:
            raise FileNotFoundError(f"No such directory: {path}")
        return sorted(children)

    def is_dir(self, path: str) -> bool:
        prefix = path.rstrip("/") + "/"
        return any(name.startswith(prefix) for name in self.files)

    def is_file(self, path: str) -> bool:
        return path in self.files


@pytest.fixture
def memory_source():
    """Factory for in-memory sources."""
    return MemorySource


@pytest.fixture
def sample_source() -> MemorySource:
    """The three-line file used by the search scenarios."""
    return MemorySource({"/mods/a.txt": b"foo\nbar\nfoobar\n"})
