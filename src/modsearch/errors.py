"""Exceptions raised by ModSearch."""

from __future__ import annotations


class ModSearchError(Exception):
    """Base class for ModSearch failures."""


class InvalidPatternError(ModSearchError, ValueError):
    """The query cannot be compiled into a matcher."""

    def __init__(self, query: str, reason: str) -> None:
        super().__init__(f"Invalid search pattern {query!r}: {reason}")
        self.query = query
        self.reason = reason
