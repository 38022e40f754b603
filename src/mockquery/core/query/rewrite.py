"""Rewrite provider pattern-match calls onto the in-memory LIKE evaluator.

Query predicates are Python expression trees (`ast`). The provider's LIKE is
written `functions.like(subject, pattern)` or
`functions.like(subject, pattern, escape)`, where `functions` is a marker
receiver carrying no data. Counting the receiver, the call has three or four
operands.

The rewriter replaces each such call with `like_match(subject, pattern, escape)`
and rebuilds everything else from rewritten children. The input tree is never
mutated; leaves (constants and names) are shared as-is.
"""

from __future__ import annotations

import ast
import logging
from typing import Any, Optional

from mockquery.core.config import FUNCTIONS_MARKER, IN_MEMORY_LIKE_NAME, LIKE_METHOD_NAME
from mockquery.core.enums import CallKind

logger = logging.getLogger(__name__)

_OPERAND_COUNT_TO_KIND = {
    3: CallKind.PATTERN_MATCH_THREE_ARG,
    4: CallKind.PATTERN_MATCH_FOUR_ARG,
}


def _is_like_callee(func: ast.expr) -> bool:
    return (
        isinstance(func, ast.Attribute)
        and func.attr == LIKE_METHOD_NAME
        and isinstance(func.value, ast.Name)
        and func.value.id == FUNCTIONS_MARKER
    )


def classify_call(node: ast.Call) -> CallKind:
    """Classify a call node by callee identity and operand count.

    Examples:
        >>> classify_call(ast.parse("functions.like(x, 'a%')", mode="eval").body)
        <CallKind.PATTERN_MATCH_THREE_ARG: 'PATTERN_MATCH_THREE_ARG'>
        >>> classify_call(ast.parse("len(x)", mode="eval").body)
        <CallKind.OTHER: 'OTHER'>
    """
    if not _is_like_callee(node.func):
        return CallKind.OTHER
    if node.keywords or any(isinstance(a, ast.Starred) for a in node.args):
        logger.debug("Leaving %s() with keyword or starred arguments untouched", LIKE_METHOD_NAME)
        return CallKind.OTHER
    # The marker receiver counts as the first operand
    kind = _OPERAND_COUNT_TO_KIND.get(len(node.args) + 1, CallKind.OTHER)
    if kind is CallKind.OTHER:
        logger.debug(
            "Leaving %s() with %d operands untouched", LIKE_METHOD_NAME, len(node.args) + 1
        )
    return kind


class LikeCallRewriter(ast.NodeTransformer):
    """Pure tree rewriter redirecting `functions.like(...)` to `like_match(...)`."""

    def visit_Constant(self, node: ast.Constant) -> ast.Constant:
        return node

    def visit_Name(self, node: ast.Name) -> ast.Name:
        return node

    def visit_Call(self, node: ast.Call) -> ast.expr:
        kind = classify_call(node)
        if kind.is_pattern_match:
            return self._rewrite_like(node, kind)

        func = self.visit(node.func)
        args = [self.visit(a) for a in node.args]
        keywords = [self.visit(k) for k in node.keywords]
        return ast.copy_location(ast.Call(func=func, args=args, keywords=keywords), node)

    def _rewrite_like(self, node: ast.Call, kind: CallKind) -> ast.Call:
        # Marker receiver is dropped; the remaining operands keep their order.
        operands = [self.visit(a) for a in node.args]
        if kind is CallKind.PATTERN_MATCH_THREE_ARG:
            operands.append(ast.copy_location(ast.Constant(value=None), node))
        call = ast.Call(
            func=ast.copy_location(ast.Name(id=IN_MEMORY_LIKE_NAME, ctx=ast.Load()), node),
            args=operands,
            keywords=[],
        )
        return ast.copy_location(call, node)

    def generic_visit(self, node: ast.AST) -> ast.AST:
        fields = {}
        for name, value in ast.iter_fields(node):
            if isinstance(value, list):
                fields[name] = [self.visit(v) if isinstance(v, ast.AST) else v for v in value]
            elif isinstance(value, ast.AST):
                fields[name] = self.visit(value)
            else:
                fields[name] = value
        rebuilt = type(node)(**fields)
        if hasattr(node, "lineno"):
            ast.copy_location(rebuilt, node)
        return rebuilt


def translate_call(node: ast.Call) -> ast.expr:
    """Rewrite a single call node and everything beneath it.

    Recognized pattern-match calls become `like_match(subject, pattern, escape)`,
    with `None` filled in for a missing escape. Any other call is rebuilt with
    the same target and rewritten children.
    """
    return LikeCallRewriter().visit_Call(node)


def rewrite_expression(tree: ast.AST) -> ast.AST:
    """Rewrite every pattern-match call in an expression tree."""
    return LikeCallRewriter().visit(tree)


# ============================================================================
# TRANSLATION FAILURE MARKER
# ============================================================================


class _NotTranslated:
    """Placeholder for a sub-expression a translation pipeline could not handle."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "not_translated_marker"

    def __reduce__(self) -> str:
        return "not_translated_marker"


not_translated_marker = _NotTranslated()


def is_translation_failure(original: Optional[Any], translated: Optional[Any]) -> bool:
    """Report whether a non-null expression translated to the failure marker."""
    return original is not None and translated is not_translated_marker
