"""SQL LIKE emulation for in-memory string values.

A LIKE pattern is translated into an anchored regular expression:

- `_` matches any single character
- `%` matches any run of characters, including an empty one
- a single escape character turns the wildcard that follows it into a literal
- everything else matches itself, case-insensitively

Matching runs on the `regex` engine with a fixed time budget so that a
pathological pattern fails with PatternTimeout instead of stalling the caller.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import regex

from mockquery.core.config import (
    REGEX_PREFIX,
    REGEX_SPECIAL_CHARS,
    REGEX_SUFFIX,
    get_regex_timeout_seconds,
)

logger = logging.getLogger(__name__)

_MATCH_FLAGS = regex.IGNORECASE | regex.DOTALL


class PatternTimeout(TimeoutError):
    """Matching a translated LIKE pattern exceeded the time budget."""

    def __init__(self, pattern: str, timeout: float) -> None:
        # args hold both values so the exception can be rebuilt from them
        super().__init__(pattern, timeout)
        self.pattern = pattern
        self.timeout = timeout

    def __str__(self) -> str:
        return f"LIKE pattern {self.pattern!r} timed out after {self.timeout:.3f}s"


def _equals_ignore_case(subject: str, pattern: str) -> bool:
    """Ordinal comparison folding one character at a time (no "ß" == "SS")."""
    return (
        len(subject) == len(pattern)
        and regex.fullmatch(regex.escape(pattern), subject, flags=regex.IGNORECASE) is not None
    )


def _build_escape_regex(special_chars: Iterable[str]) -> "regex.Pattern":
    return regex.compile("|".join(regex.escape(c) for c in special_chars))


_DEFAULT_ESCAPE_RE = _build_escape_regex(REGEX_SPECIAL_CHARS)


def _single_escape_char(escape: Optional[str]) -> Optional[str]:
    # Only the first character of a longer escape string is honoured.
    if not escape:
        return None
    return escape[0]


def _escape_regex_chars(pattern: str, escape_char: Optional[str]) -> str:
    """Prefix regex metacharacters with a backslash, leaving the escape character alone."""
    if escape_char is None or escape_char not in REGEX_SPECIAL_CHARS:
        escape_re = _DEFAULT_ESCAPE_RE
    else:
        escape_re = _build_escape_regex(c for c in REGEX_SPECIAL_CHARS if c != escape_char)
    return escape_re.sub(lambda m: "\\" + m.group(0), pattern)


def _expand_wildcards(escaped: str, escape_char: Optional[str]) -> str:
    parts = []
    for i, c in enumerate(escaped):
        is_escaped = i > 0 and escaped[i - 1] == escape_char
        if c == "_":
            parts.append("_" if is_escaped else ".")
        elif c == "%":
            parts.append("%" if is_escaped else ".*")
        elif c != escape_char:
            parts.append(c)
    return "".join(parts)


def translate_like_pattern(pattern: str, escape: Optional[str] = None) -> str:
    """Translate a LIKE pattern into an anchored regular expression string.

    The result depends only on its arguments.

    Args:
        pattern: Pattern in LIKE syntax.
        escape: Optional escape marker; only its first character is used.

    Returns:
        Regex source anchored at the start, tolerating trailing whitespace.

    Examples:
        >>> translate_like_pattern("a_c%")
        '\\\\Aa.c.*\\\\s*\\\\Z'
        >>> translate_like_pattern("100!%", "!")
        '\\\\A100%\\\\s*\\\\Z'
    """
    escape_char = _single_escape_char(escape)
    body = _expand_wildcards(_escape_regex_chars(pattern, escape_char), escape_char)
    return f"{REGEX_PREFIX}{body}{REGEX_SUFFIX}"


def like_match(
    subject: Optional[str], pattern: Optional[str], escape: Optional[str] = None
) -> bool:
    """Evaluate `subject LIKE pattern [ESCAPE escape]` in memory.

    Args:
        subject: Value being tested. None never matches.
        pattern: LIKE pattern. None never matches.
        escape: Optional escape marker; only its first character is used.

    Returns:
        True if the subject matches the pattern.

    Raises:
        PatternTimeout: If the match exceeds the configured time budget.
        regex.error: If dropping a metacharacter escape leaves an invalid regex.

    Examples:
        >>> like_match("ABC", "abc", None)
        True
        >>> like_match("hello", "hello%", None)
        True
        >>> like_match("aXb", "a\\\\_b", "\\\\")
        False
    """
    if subject is None or pattern is None:
        return False

    # Literal equality wins before any wildcard handling
    if _equals_ignore_case(subject, pattern):
        return True

    if not subject or not pattern:
        return False

    regex_pattern = translate_like_pattern(pattern, escape)
    timeout = get_regex_timeout_seconds()
    logger.debug("LIKE %r (escape %r) -> %s", pattern, escape, regex_pattern)
    try:
        match = regex.match(regex_pattern, subject, flags=_MATCH_FLAGS, timeout=timeout)
    except TimeoutError as e:
        logger.warning("LIKE pattern %r timed out after %.3fs", pattern, timeout)
        raise PatternTimeout(pattern, timeout) from e
    return match is not None
