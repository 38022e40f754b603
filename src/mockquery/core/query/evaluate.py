"""In-memory evaluation of query predicates.

Predicates are written as Python lambdas against the provider surface, e.g.::

    lambda row: functions.like(row["name"], "jo%")

`compile_predicate` rewrites the pattern-match calls onto `like_match` and
compiles the result, so the same predicate a database would translate to SQL
runs here against plain Python objects. Predicate source is trusted code.
"""

from __future__ import annotations

import ast
import logging
from typing import Any, Callable, Iterable, Iterator, Optional, Union

from mockquery.core.config import FUNCTIONS_MARKER, IN_MEMORY_LIKE_NAME
from .patterns import like_match
from .rewrite import rewrite_expression

logger = logging.getLogger(__name__)

Predicate = Union[str, Callable[[Any], bool]]


class InvalidOperationError(RuntimeError):
    """A provider function was invoked outside of a query."""


class DbFunctions:
    """Marker receiver for provider functions such as `functions.like`."""

    def like(self, *args: Any, **kwargs: Any) -> bool:
        raise InvalidOperationError(
            f"'{FUNCTIONS_MARKER}.like' is only supported inside a query predicate; "
            "compile the predicate with compile_predicate() before evaluating it."
        )

    def __repr__(self) -> str:
        return FUNCTIONS_MARKER


functions = DbFunctions()

# Builtins visible to predicates
_PREDICATE_BUILTINS = {
    "abs": abs,
    "all": all,
    "any": any,
    "bool": bool,
    "float": float,
    "int": int,
    "isinstance": isinstance,
    "len": len,
    "max": max,
    "min": min,
    "str": str,
}


def compile_predicate(source: str) -> Callable[[Any], bool]:
    """Compile a lambda source string into a callable with LIKE emulation.

    Args:
        source: A single Python lambda expression.

    Returns:
        The compiled lambda.

    Raises:
        ValueError: If the source does not parse or is not a lambda.

    Examples:
        >>> pred = compile_predicate("lambda r: functions.like(r, 'a%')")
        >>> pred("Alpha"), pred("beta")
        (True, False)
    """
    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as e:
        raise ValueError(f"Invalid predicate source: {e}") from e
    if not isinstance(tree.body, ast.Lambda):
        raise ValueError("Predicate must be a single lambda expression")

    rewritten = ast.fix_missing_locations(rewrite_expression(tree))
    code = compile(rewritten, "<predicate>", "eval")
    namespace = {
        "__builtins__": _PREDICATE_BUILTINS,
        IN_MEMORY_LIKE_NAME: like_match,
        FUNCTIONS_MARKER: functions,
    }
    logger.debug("Compiled predicate: %s", ast.unparse(rewritten))
    return eval(code, namespace)  # noqa: S307 - predicate source is trusted


def _as_callable(predicate: Predicate) -> Callable[[Any], bool]:
    if isinstance(predicate, str):
        return compile_predicate(predicate)
    return predicate


def where(rows: Iterable[Any], predicate: Predicate) -> Iterator[Any]:
    """Lazily yield rows for which the predicate is truthy.

    The predicate is compiled eagerly; a PatternTimeout raised while testing a
    row propagates to the consumer.
    """
    fn = _as_callable(predicate)
    return (row for row in rows if fn(row))


def count(rows: Iterable[Any], predicate: Predicate) -> int:
    return sum(1 for _ in where(rows, predicate))


def first_or_none(rows: Iterable[Any], predicate: Predicate) -> Optional[Any]:
    return next(where(rows, predicate), None)
