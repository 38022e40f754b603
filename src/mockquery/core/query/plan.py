from __future__ import annotations

from typing import Any, Dict, List, Optional

import polars as pl

from mockquery.core.config import get_filter_op
from .patterns import like_match


def like_expr(col: str, pattern: str, escape: Optional[str] = None) -> pl.Expr:
    """Polars expression evaluating `col LIKE pattern` cell by cell.

    Null cells stay null, so they are dropped by both `like` and `not_like` filters.
    """
    return (
        pl.col(col)
        .cast(pl.Utf8, strict=False)
        .map_elements(lambda v: like_match(v, pattern, escape), return_dtype=pl.Boolean)
    )


def _apply_filters(
    lf: pl.LazyFrame, filters: Optional[List[Dict[str, Any]]]
) -> pl.LazyFrame:
    if not filters:
        return lf
    exprs = []
    for f in filters:
        col = f.get("col")
        if not col or f.get("op") is None:
            continue
        op = get_filter_op(f["op"])
        val = f.get("value")
        c = pl.col(col)
        if op == "eq":
            exprs.append(c == val)
        elif op == "neq":
            exprs.append(c != val)
        elif op == "in":
            exprs.append(c.is_in(val if isinstance(val, list) else [val]))
        elif op == "contains":
            exprs.append(
                c.cast(pl.Utf8, strict=False).str.contains(str(val), literal=True)
            )
        elif op == "like":
            exprs.append(like_expr(col, str(val), f.get("escape")))
        elif op == "not_like":
            exprs.append(~like_expr(col, str(val), f.get("escape")))
    if exprs:
        lf = lf.filter(pl.all_horizontal(exprs))
    return lf


def build_lazy_query(
    lf: pl.LazyFrame,
    *,
    columns: Optional[List[str]] = None,
    filters: Optional[List[Dict[str, Any]]] = None,
    distinct: bool = False,
    order_by: Optional[List[Dict[str, Any]]] = None,
    limit: Optional[int] = None,
) -> pl.LazyFrame:
    """Build a LazyFrame pipeline from structured knobs.

    Filters are dicts of `col`, `op`, `value` and, for LIKE ops, `escape`.
    Filters are applied before column selection so they may reference
    columns that are not returned.

    Raises:
        ValueError: If a filter uses an unknown op.
    """
    lf = _apply_filters(lf, filters)

    if columns:
        names = lf.collect_schema().names()
        keep = [c for c in columns if c in names]
        if keep:
            lf = lf.select(keep)

    if distinct:
        lf = lf.unique(maintain_order=True)

    if order_by:
        by_cols = []
        descending = []
        for ob in order_by:
            by_cols.append(ob.get("col"))
            descending.append(bool(ob.get("desc", False)))
        lf = lf.sort(by_cols, descending=descending)

    if limit:
        lf = lf.limit(limit)

    return lf
