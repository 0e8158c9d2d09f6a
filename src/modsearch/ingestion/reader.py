"""Turn a file into decoded lines, whole or chunk by chunk."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List

from modsearch.ingestion.encoding import (
    DETECTION_SAMPLE_BYTES,
    EncodingGuess,
    decode,
    detect_encoding,
    incremental_decoder,
)
from modsearch.ingestion.source import FileSource
from modsearch.search.guard import GuardPolicy
from modsearch.utils.text import iter_lines_stream, split_lines

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class DecodedLines:
    """Encoding of a file plus a lazy iterator over its lines.

    For chunked reads, iterating ``lines`` performs the remaining I/O and may
    raise ``OSError``.
    """

    encoding: str
    lines: Iterator[str]
    streamed: bool = False


def _take_sample(chunks: Iterator[bytes], size: int) -> bytes:
    parts: List[bytes] = []
    collected = 0
    for chunk in chunks:
        parts.append(chunk)
        collected += len(chunk)
        if collected >= size:
            break
    return b"".join(parts)


def iter_decoded_text(chunks: Iterable[bytes], guess: EncodingGuess) -> Iterator[str]:
    if guess.is_binary:
        return
    decoder = incremental_decoder(guess)
    for chunk in chunks:
        text = decoder.decode(chunk)
        if text:
            yield text
    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail


def read_lines(path: str, source: FileSource, policy: GuardPolicy) -> DecodedLines:
    """Open ``path`` for line scanning, picking the reading strategy by size."""
    size = source.metadata(path).size
    if not policy.is_large(size):
        data = source.read_bytes(path)
        guess = detect_encoding(data[:DETECTION_SAMPLE_BYTES])
        LOGGER.debug("Read %s whole (%d bytes, %s)", path, size, guess.label)
        return DecodedLines(encoding=guess.label, lines=iter(split_lines(decode(data, guess))))

    chunks = iter(source.iter_chunks(path, policy.chunk_bytes))
    head = _take_sample(chunks, DETECTION_SAMPLE_BYTES)
    guess = detect_encoding(head)
    LOGGER.debug("Streaming %s in %d byte chunks (%d bytes, %s)", path, policy.chunk_bytes, size, guess.label)
    text_stream = iter_decoded_text(itertools.chain([head], chunks), guess)
    return DecodedLines(encoding=guess.label, lines=iter_lines_stream(text_stream), streamed=True)


def count_lines(lines: Iterable[str]) -> int:
    return sum(1 for _ in lines)
