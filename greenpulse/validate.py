from __future__ import annotations
import pandas as pd
from typing import cast

from . import canon, exceptions


def assert_series(df: pd.DataFrame) -> None:
    if df.index.name != canon.INDEX_NAME:
        raise exceptions.SeriesError(f"Index must be '{canon.INDEX_NAME}'.")
    if not isinstance(df.index, pd.DatetimeIndex):
        raise exceptions.SeriesError("Index must be a DatetimeIndex.")
    tz_index = cast(pd.DatetimeIndex, df.index)
    if tz_index.tz is None:
        raise exceptions.SeriesError("Index must be tz-aware.")
    for col in canon.REQUIRED_COLS:
        if col not in df.columns:
            raise exceptions.SeriesError(f"Missing required column '{col}'.")
    if not df.index.is_monotonic_increasing:
        raise exceptions.SeriesError("Index must be sorted ascending.")
    if df.index.has_duplicates:
        raise exceptions.SeriesError("Timestamps must be unique within a series.")
