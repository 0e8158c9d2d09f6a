"""Line splitting helpers shared by every reading path."""

from __future__ import annotations

from typing import Iterable, Iterator, List


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


def split_lines(text: str) -> List[str]:
    """Split text at ``\\n`` boundaries.

    A trailing ``\\r`` belongs to the separator, and a final newline ends the
    last line rather than opening an empty one, so CRLF and LF input yield the
    same lines.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [_strip_cr(line) for line in lines]


def iter_lines_stream(text_stream: Iterable[str]) -> Iterator[str]:
    """Same splitting rule as `split_lines`, over a stream of text parts.

    Buffers only the pieces of the current incomplete line and joins them
    once its newline arrives.
    """
    pending: List[str] = []
    for part in text_stream:
        if "\n" not in part:
            if part:
                pending.append(part)
            continue
        first, *complete, rest = part.split("\n")
        pending.append(first)
        yield _strip_cr("".join(pending))
        for line in complete:
            yield _strip_cr(line)
        pending = [rest] if rest else []

    tail = "".join(pending)
    if tail:
        yield _strip_cr(tail)
