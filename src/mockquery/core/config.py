"""Query emulation configuration constants.

This module centralizes the constants shared by the LIKE translator, the call
rewriter and the tabular query planner. They are read-only after import.

Sections:
    - Regex translation: metacharacters neutralized before wildcard expansion
    - Timeouts: execution budget for a single pattern match
    - Call identity: names that identify the provider's pattern-match call
    - Filter operators: structured filter ops accepted by the planner
"""

from __future__ import annotations

# ============================================================================
# REGEX TRANSLATION
# ============================================================================

# Characters with special meaning in a regular expression. Each one is prefixed
# with a backslash before wildcard expansion, except the active escape character.
REGEX_SPECIAL_CHARS = (".", "$", "^", "{", "[", "(", "|", ")", "*", "+", "?", "\\")

# Anchors wrapped around the translated pattern body. Trailing whitespace in the
# subject is tolerated.
REGEX_PREFIX = r"\A"
REGEX_SUFFIX = r"\s*\Z"


# ============================================================================
# TIMEOUTS
# ============================================================================

# Wall-clock budget for evaluating one translated pattern (milliseconds)
REGEX_TIMEOUT_MS = 1000.0


# ============================================================================
# CALL IDENTITY
# ============================================================================

# `functions.like(subject, pattern[, escape])` is the provider's pattern-match call.
FUNCTIONS_MARKER = "functions"
LIKE_METHOD_NAME = "like"

# Name the rewritten call is bound to at evaluation time
IN_MEMORY_LIKE_NAME = "like_match"


# ============================================================================
# FILTER OPERATORS
# ============================================================================

FILTER_OPS = ("eq", "neq", "in", "contains", "like", "not_like")

_FILTER_OP_ALIASES = {
    "==": "eq",
    "!=": "neq",
    "not_eq": "neq",
    "ilike": "like",
    "not_ilike": "not_like",
    "notlike": "not_like",
}


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def get_regex_timeout_seconds() -> float:
    """Get the pattern match budget in seconds.

    Examples:
        >>> get_regex_timeout_seconds()
        1.0
    """
    return REGEX_TIMEOUT_MS / 1000.0


def get_filter_op(name: str) -> str:
    """Resolve a filter operator name, including aliases.

    Args:
        name: Operator as written in a filter (case-insensitive, e.g. "LIKE", "!=").

    Returns:
        Canonical operator from FILTER_OPS.

    Raises:
        ValueError: If the operator is unknown.

    Examples:
        >>> get_filter_op("ILIKE")
        'like'
        >>> get_filter_op("!=")
        'neq'
    """
    op = str(name).strip().lower()
    op = _FILTER_OP_ALIASES.get(op, op)
    if op not in FILTER_OPS:
        raise ValueError(
            f"Unknown filter op: '{name}'. Valid ops: {', '.join(FILTER_OPS)}"
        )
    return op
