"""Compile search options into a reusable line matcher.

Semantics are those of Python's ``re`` module on ``str`` patterns: ``\\b``
and ``\\w`` are Unicode-aware, ``IGNORECASE`` follows Unicode case folding,
and neither ``MULTILINE`` nor ``DOTALL`` is set. Lines are matched one at a
time, so ``^`` and ``$`` anchor to the line being scanned.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

from modsearch.errors import InvalidPatternError
from modsearch.models import SearchOptions, Segment


@dataclass(frozen=True, slots=True)
class Pattern:
    """Compiled matcher for one set of search options.

    ``re.Pattern`` objects carry no scanning state, so a single instance can
    be shared by every line of every file, from any thread.
    """

    options: SearchOptions
    regex: re.Pattern[str]

    def spans(self, line: str) -> List[Tuple[int, int]]:
        """Non-overlapping, non-empty match spans, left to right."""
        return [match.span() for match in self.regex.finditer(line) if match.end() > match.start()]

    def matches(self, line: str) -> bool:
        return self.regex.search(line) is not None

    def segments(self, line: str) -> Tuple[Segment, ...]:
        """Split ``line`` into alternating plain and matched segments.

        Returns an empty tuple when nothing matches. A line matched only by
        zero-width matches (``^$``, ``\\b``) gets an empty matched segment at
        the first match position.
        """
        spans = self.spans(line)
        if not spans:
            found = self.regex.search(line)
            if found is None:
                return ()
            spans = [found.span()]

        segments: List[Segment] = []
        cursor = 0
        for start, end in spans:
            if start > cursor:
                segments.append(Segment(line[cursor:start], False))
            segments.append(Segment(line[start:end], True))
            cursor = end
        if cursor < len(line):
            segments.append(Segment(line[cursor:], False))
        return tuple(segments)


def build_expression(options: SearchOptions) -> str:
    if options.use_regex:
        return options.query
    expression = re.escape(options.query)
    if options.whole_word:
        expression = rf"\b{expression}\b"
    return expression


def compile_pattern(options: SearchOptions) -> Pattern:
    """Compile ``options`` or raise `InvalidPatternError`."""
    if not options.query:
        raise InvalidPatternError(options.query, "empty query")

    flags = 0 if options.case_sensitive else re.IGNORECASE
    try:
        regex = re.compile(build_expression(options), flags)
    except re.error as exc:
        raise InvalidPatternError(options.query, str(exc)) from exc
    return Pattern(options=options, regex=regex)
