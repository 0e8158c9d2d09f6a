"""Access to file bytes, metadata and directory listings."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Protocol

from modsearch.models import FileMetadata

DEFAULT_CHUNK_BYTES = 64 * 1024


class FileSource(Protocol):
    """Everything the search core needs from the operating system.

    All methods raise ``OSError`` when the path cannot be read.
    """

    def read_bytes(self, path: str) -> bytes: ...

    def iter_chunks(self, path: str, chunk_size: int = DEFAULT_CHUNK_BYTES) -> Iterator[bytes]: ...

    def metadata(self, path: str) -> FileMetadata: ...

    def list_directory(self, path: str) -> List[str]: ...

    def is_dir(self, path: str) -> bool: ...

    def is_file(self, path: str) -> bool: ...


class LocalFileSource:
    """FileSource backed by the local filesystem."""

    def read_bytes(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def iter_chunks(self, path: str, chunk_size: int = DEFAULT_CHUNK_BYTES) -> Iterator[bytes]:
        with Path(path).open("rb") as handle:
            for chunk in iter(lambda: handle.read(chunk_size), b""):
                yield chunk

    def metadata(self, path: str) -> FileMetadata:
        stat = Path(path).stat()
        return FileMetadata(size=stat.st_size, modified_at=datetime.fromtimestamp(stat.st_mtime))

    def list_directory(self, path: str) -> List[str]:
        return [os.path.join(path, name) for name in sorted(os.listdir(path))]

    def is_dir(self, path: str) -> bool:
        return Path(path).is_dir()

    def is_file(self, path: str) -> bool:
        return Path(path).is_file()


def default_source() -> FileSource:
    return LocalFileSource()
