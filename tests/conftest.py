"""Shared pytest fixtures for query emulation tests."""

import ast
from pathlib import Path
from typing import Dict, List

import pytest


PEOPLE_CSV = """name,city,code
John,Hamburg,A_1
joanna,Berlin,AB1
Mark,Augsburg,A%2
,Bremen,A_2
"""


def parse_expr(source: str) -> ast.expr:
    """Parse a single Python expression and return its body node."""
    return ast.parse(source, mode="eval").body


@pytest.fixture
def people_rows() -> List[Dict[str, object]]:
    """Rows as plain dicts, including a row with a missing name."""
    return [
        {"name": "John", "city": "Hamburg", "code": "A_1"},
        {"name": "joanna", "city": "Berlin", "code": "AB1"},
        {"name": "Mark", "city": "Augsburg", "code": "A%2"},
        {"name": None, "city": "Bremen", "code": "A_2"},
    ]


@pytest.fixture
def people_csv(tmp_path: Path) -> Path:
    """CSV file with the same rows as `people_rows`."""
    csv_path = tmp_path / "people.csv"
    csv_path.write_text(PEOPLE_CSV, encoding="utf-8")
    return csv_path
