"""Tests for evaluating rewritten predicates over in-memory rows."""

from unittest.mock import patch

import pytest

from mockquery.core.query.evaluate import (
    InvalidOperationError,
    compile_predicate,
    count,
    first_or_none,
    functions,
    where,
)
from mockquery.core.query.patterns import PatternTimeout


def _names(rows):
    return [r["name"] for r in rows]


def test_where_with_like(people_rows):
    rows = list(where(people_rows, "lambda r: functions.like(r['name'], 'jo%')"))
    assert _names(rows) == ["John", "joanna"]


def test_where_with_escape(people_rows):
    rows = list(where(people_rows, "lambda r: functions.like(r['code'], 'A!_%', '!')"))
    assert [r["code"] for r in rows] == ["A_1", "A_2"]


def test_null_subject_never_matches(people_rows):
    rows = list(where(people_rows, "lambda r: functions.like(r['name'], '%')"))
    assert None not in _names(rows)
    assert len(rows) == 3


def test_predicate_combines_like_with_other_expressions(people_rows):
    source = (
        "lambda r: r['name'] is not None "
        "and not functions.like(r['name'], 'jo%') "
        "and functions.like(r['city'], '%burg')"
    )
    assert _names(where(people_rows, source)) == ["Mark"]


def test_count_and_first_or_none(people_rows):
    assert count(people_rows, "lambda r: functions.like(r['city'], '%burg')") == 2
    assert first_or_none(people_rows, "lambda r: functions.like(r['city'], 'b%')")["name"] == "joanna"
    assert first_or_none(people_rows, "lambda r: functions.like(r['city'], 'paris')") is None


def test_compiled_predicate_is_reusable(people_rows):
    pred = compile_predicate("lambda r: functions.like(r['city'], 'B_____')")
    assert _names(where(people_rows, pred)) == ["joanna", None]
    assert pred({"city": "bremen "}) is True


def test_plain_callable_predicate(people_rows):
    assert _names(where(people_rows, lambda r: r["city"] == "Berlin")) == ["joanna"]


@pytest.mark.parametrize(
    "source",
    ["functions.like(x, 'a%')", "lambda r: (", "r = 1"],
    ids=["not_lambda", "syntax_error", "statement"],
)
def test_compile_predicate_rejects_invalid_source(source):
    with pytest.raises(ValueError):
        compile_predicate(source)


def test_where_compiles_eagerly(people_rows):
    with pytest.raises(ValueError):
        where(people_rows, "not a lambda")


def test_direct_provider_call_raises():
    with pytest.raises(InvalidOperationError, match="only supported inside a query"):
        functions.like("a", "a%")


def test_unrecognized_shape_reaches_provider_marker():
    pred = compile_predicate("lambda r: functions.like(r)")
    with pytest.raises(InvalidOperationError):
        pred("abc")


def test_timeout_propagates_to_consumer(people_rows):
    with patch(
        "mockquery.core.query.evaluate.like_match",
        side_effect=PatternTimeout("jo%", 1.0),
    ):
        rows = where(people_rows, "lambda r: functions.like(r['name'], 'jo%')")
        with pytest.raises(PatternTimeout):
            list(rows)
