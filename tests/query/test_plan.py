"""Tests for Polars query planning with LIKE filters."""

from pathlib import Path

import polars as pl
import pytest

from mockquery.core.query.patterns import PatternTimeout
from mockquery.core.query.plan import build_lazy_query, like_expr
from mockquery.core.query.scan import scan_dataset


@pytest.fixture
def people_lf(people_rows) -> pl.LazyFrame:
    return pl.DataFrame(people_rows, schema={"name": pl.Utf8, "city": pl.Utf8, "code": pl.Utf8}).lazy()


def test_like_filter(people_lf):
    out = build_lazy_query(people_lf, filters=[{"col": "name", "op": "like", "value": "jo%"}])
    assert out.collect()["name"].to_list() == ["John", "joanna"]


def test_not_like_filter_drops_nulls(people_lf):
    out = build_lazy_query(people_lf, filters=[{"col": "name", "op": "not_like", "value": "jo%"}])
    assert out.collect()["name"].to_list() == ["Mark"]


def test_like_filter_with_escape(people_lf):
    filters = [{"col": "code", "op": "like", "value": "A!_%", "escape": "!"}]
    out = build_lazy_query(people_lf, filters=filters)
    assert out.collect()["code"].to_list() == ["A_1", "A_2"]


@pytest.mark.parametrize("op", ["LIKE", "ilike", "Like"], ids=["upper", "alias", "mixed"])
def test_like_op_aliases(people_lf, op):
    out = build_lazy_query(people_lf, filters=[{"col": "city", "op": op, "value": "%BURG"}])
    assert out.collect()["city"].to_list() == ["Hamburg", "Augsburg"]


def test_filters_are_combined(people_lf):
    filters = [
        {"col": "city", "op": "like", "value": "%burg"},
        {"col": "name", "op": "neq", "value": "John"},
    ]
    out = build_lazy_query(people_lf, filters=filters)
    assert out.collect()["name"].to_list() == ["Mark"]


def test_other_ops(people_lf):
    assert build_lazy_query(
        people_lf, filters=[{"col": "city", "op": "eq", "value": "Berlin"}]
    ).collect().height == 1
    assert build_lazy_query(
        people_lf, filters=[{"col": "city", "op": "in", "value": ["Berlin", "Bremen"]}]
    ).collect().height == 2
    assert build_lazy_query(
        people_lf, filters=[{"col": "code", "op": "contains", "value": "%"}]
    ).collect()["code"].to_list() == ["A%2"]


def test_unknown_op_raises(people_lf):
    with pytest.raises(ValueError, match="Unknown filter op: 'regex'"):
        build_lazy_query(people_lf, filters=[{"col": "name", "op": "regex", "value": "x"}])


def test_incomplete_filters_are_skipped(people_lf):
    out = build_lazy_query(people_lf, filters=[{"op": "like", "value": "x"}, {"col": "name"}])
    assert out.collect().height == 4


def test_columns_order_and_limit(people_lf):
    out = build_lazy_query(
        people_lf,
        columns=["city", "missing"],
        filters=[{"col": "name", "op": "like", "value": "%"}],
        order_by=[{"col": "city", "desc": True}],
        limit=2,
    ).collect()
    assert out.columns == ["city"]
    assert out["city"].to_list() == ["Hamburg", "Berlin"]


def test_like_expr_select(people_lf):
    out = people_lf.select(like_expr("city", "b%").alias("b_city")).collect()
    assert out["b_city"].to_list() == [False, True, False, True]


def test_scan_dataset(people_csv: Path):
    lf = scan_dataset(people_csv)
    out = build_lazy_query(lf, filters=[{"col": "city", "op": "like", "value": "%burg"}])
    assert out.collect()["name"].to_list() == ["John", "Mark"]


def test_scan_dataset_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError, match="Dataset not found"):
        scan_dataset(tmp_path / "missing.csv")


@pytest.fixture
def backtracking_lf() -> pl.LazyFrame:
    """Single row that forces catastrophic backtracking for `%a%a...`."""
    return pl.DataFrame({"name": ["a" * 5000 + "!"]}).lazy()


def test_like_filter_timeout_surfaces_as_pattern_timeout(backtracking_lf):
    pattern = "%a" * 200
    out = build_lazy_query(backtracking_lf, filters=[{"col": "name", "op": "like", "value": pattern}])
    with pytest.raises(PatternTimeout) as excinfo:
        out.collect()
    assert excinfo.value.pattern == pattern


def test_like_expr_timeout_surfaces_as_pattern_timeout(backtracking_lf):
    with pytest.raises(PatternTimeout):
        backtracking_lf.select(like_expr("name", "%a" * 200)).collect()
