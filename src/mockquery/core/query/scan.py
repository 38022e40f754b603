from __future__ import annotations

from pathlib import Path
from typing import Union

import polars as pl


def scan_dataset(path: Union[str, Path], *, has_header: bool = True) -> pl.LazyFrame:
    """Return a LazyFrame scanning a CSV file without materializing it."""
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Dataset not found: {csv_path}")
    return pl.scan_csv(str(csv_path), has_header=has_header)
