"""Core query emulation public API.

Rewrites provider pattern-match calls in query expression trees and evaluates
them in memory. The LIKE translator lives in `patterns`, the tree rewriter in
`rewrite`, the sequence evaluator in `evaluate`, and Polars-based planning over
CSV datasets in `scan` and `plan`.
"""

from .patterns import PatternTimeout, like_match, translate_like_pattern
from .rewrite import (
    classify_call,
    is_translation_failure,
    not_translated_marker,
    rewrite_expression,
    translate_call,
)
from .evaluate import compile_predicate, count, first_or_none, functions, where
from .scan import scan_dataset
from .plan import build_lazy_query, like_expr

__all__ = [
    "PatternTimeout",
    "like_match",
    "translate_like_pattern",
    "classify_call",
    "translate_call",
    "rewrite_expression",
    "not_translated_marker",
    "is_translation_failure",
    "compile_predicate",
    "functions",
    "where",
    "count",
    "first_or_none",
    "scan_dataset",
    "build_lazy_query",
    "like_expr",
]
