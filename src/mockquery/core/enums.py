"""Core enumerations used across the package."""

from __future__ import annotations

from enum import Enum


class CallKind(str, Enum):
    """Shapes of call nodes the rewriter distinguishes.

    Values are strings to ease logging and debugging output.
    """

    PATTERN_MATCH_THREE_ARG = "PATTERN_MATCH_THREE_ARG"
    PATTERN_MATCH_FOUR_ARG = "PATTERN_MATCH_FOUR_ARG"
    OTHER = "OTHER"

    @property
    def is_pattern_match(self) -> bool:
        return self is not CallKind.OTHER


__all__ = ["CallKind"]
