# greenpulse/utils.py
from __future__ import annotations
import numpy as np
import pandas as pd
from zoneinfo import ZoneInfo
from typing import cast

from . import canon
from .types import EnergyFrame


def ensure_tz_aware_index(df: pd.DataFrame, tz: str) -> pd.DataFrame:
    if df.index.name != canon.INDEX_NAME:
        raise ValueError(f"Index must be '{canon.INDEX_NAME}', got {df.index.name}")
    idx = pd.DatetimeIndex(df.index)
    if idx.tz is None:
        df = df.tz_localize(ZoneInfo(tz))
    else:
        df = df.tz_convert(ZoneInfo(tz))
    return df


def safe_localize_series(ts: pd.Series, tz: str) -> pd.Series:
    """Parse to datetimes; unparseable values become NaT for the caller to reject."""
    try:
        s = pd.to_datetime(ts, errors="coerce", format="mixed")
    except ValueError:
        s = None
    if s is None or not pd.api.types.is_datetime64_any_dtype(s):
        # mixed UTC offsets
        s = pd.to_datetime(ts, errors="coerce", format="mixed", utc=True)
    if getattr(s.dt, "tz", None) is None:
        return s.dt.tz_localize(ZoneInfo(tz))
    return s.dt.tz_convert(ZoneInfo(tz))


def to_timestamp(value, tz) -> pd.Timestamp:
    """Coerce a datetime-like into a tz-aware Timestamp in tz (name or tzinfo)."""
    zone = ZoneInfo(tz) if isinstance(tz, str) else tz
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        return ts.tz_localize(zone)
    return ts.tz_convert(zone)


def local_index(idx: pd.DatetimeIndex, tz: str | None = None) -> pd.DatetimeIndex:
    """Return idx in the viewer's wall time (tz), or unchanged when tz is None."""
    if idx.tz is None:
        raise ValueError("Index must be tz-aware for local_index.")
    if tz is None:
        return idx
    return idx.tz_convert(ZoneInfo(tz) if isinstance(tz, str) else tz)


def hour_labels(idx: pd.DatetimeIndex) -> np.ndarray:
    return np.asarray(idx.strftime(canon.HOURLY_LABEL_FORMAT), dtype=object)


def bucket_labels(idx: pd.DatetimeIndex, window_hours: int) -> pd.Index:
    """
    Bucket key per timestamp (local wall time):
      - 168h: short weekday name ('Mon')
      - 720h: short month + day ('Jan 5')
    """
    if window_hours == canon.WEEK_HOURS:
        return pd.Index(idx.strftime(canon.WEEKDAY_LABEL_FORMAT))
    months = idx.strftime("%b")
    return pd.Index([f"{m} {d}" for m, d in zip(months, idx.day)])


def is_bucketed_window(window_hours: int) -> bool:
    return window_hours in (canon.WEEK_HOURS, canon.MONTH_HOURS)


def empty_energy_frame(tz: str = canon.DEFAULT_TZ) -> EnergyFrame:
    """
    Return an empty EnergyFrame with the correct tz-aware index and required columns.
    """
    idx = pd.DatetimeIndex([], tz=ZoneInfo(tz), name=canon.INDEX_NAME)
    out = pd.DataFrame(columns=canon.REQUIRED_COLS, index=idx, dtype=float)
    out.__class__ = EnergyFrame
    return cast(EnergyFrame, out)


def build_energy_frame(
    idx: pd.DatetimeIndex,
    actual: np.ndarray | pd.Series | list,
    predicted: np.ndarray | pd.Series | list,
) -> EnergyFrame:
    df = pd.DataFrame(
        {
            canon.INDEX_NAME: idx,
            "actual": np.asarray(actual, dtype=float),
            "predicted": np.asarray(predicted, dtype=float),
        }
    ).set_index(canon.INDEX_NAME)
    df = df.sort_index()
    df.__class__ = EnergyFrame
    return cast(EnergyFrame, df)


def as_energy_frame(df: pd.DataFrame) -> EnergyFrame:
    out = df.copy()
    out.__class__ = EnergyFrame
    return cast(EnergyFrame, out)
