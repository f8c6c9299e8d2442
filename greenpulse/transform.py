from __future__ import annotations
import numpy as np
import pandas as pd
from typing import Optional, cast

from . import canon, utils
from .types import EnergyFrame

ANNOTATED_COLS = ["label", "actual", "predicted", "deviation_pct"]


def filter_window(
    df: EnergyFrame,
    window_hours: int,
    reference_time: Optional[pd.Timestamp] = None,
) -> pd.DataFrame:
    """
    Select the rows shown for a window.

    - reference_time given: rows with reference_time - window_hours <= t <= reference_time.
    - reference_time absent: the last `window_hours` rows by position, whatever
      span of time they cover.
    """
    if reference_time is None:
        return df.iloc[-window_hours:] if window_hours > 0 else df.iloc[0:0]
    end = utils.to_timestamp(reference_time, df.index.tz)
    start = end - pd.Timedelta(hours=window_hours)
    idx = pd.DatetimeIndex(df.index)
    return df[(idx >= start) & (idx <= end)]


def deviation(actual: pd.Series, predicted: pd.Series) -> pd.Series:
    """(actual - predicted) / predicted where both exist and predicted > 0, else NaN."""
    a = actual.to_numpy(dtype=float)
    p = predicted.to_numpy(dtype=float)
    valid = ~np.isnan(a) & ~np.isnan(p) & (p > 0)
    out = np.full(len(a), np.nan)
    out[valid] = (a[valid] - p[valid]) / p[valid]
    return pd.Series(out, index=actual.index, name="deviation")


def annotate_anomalies(
    df: pd.DataFrame, threshold: float = canon.ANOMALY_THRESHOLD
) -> pd.DataFrame:
    """
    Add 'deviation_pct' (signed %, positive = over-consumption) to rows whose
    deviation from predicted strictly exceeds threshold; NaN elsewhere.
    """
    dev = deviation(df["actual"], df["predicted"])
    flagged = dev.abs() > threshold
    return df.assign(deviation_pct=(dev * 100.0).where(flagged))


def bucket_daily(df: pd.DataFrame, window_hours: int, tz: Optional[str] = None) -> pd.DataFrame:
    """
    Average actual/predicted per day bucket, keyed by display label
    (weekday for 168h, month+day for 720h) in local wall time.

    Each bucket is indexed by the local start-of-day of its first point and
    the result is sorted by that date. Means skip NaN; a bucket with no
    values for a column stays NaN.
    """
    local = utils.local_index(pd.DatetimeIndex(df.index), tz)
    s = pd.DataFrame(
        {
            "label": utils.bucket_labels(local, window_hours),
            "day": local.normalize(),
            "actual": df["actual"].to_numpy(dtype=float),
            "predicted": df["predicted"].to_numpy(dtype=float),
        }
    )
    out = (
        s.groupby("label", sort=False)
        .agg(day=("day", "first"), actual=("actual", "mean"), predicted=("predicted", "mean"))
        .reset_index()
        .sort_values("day", kind="stable")
        .set_index("day")
    )
    out.index = pd.DatetimeIndex(out.index, name=canon.INDEX_NAME)
    return out[["label", "actual", "predicted"]]


def _empty_annotated(tz) -> EnergyFrame:
    idx = pd.DatetimeIndex([], tz=tz, name=canon.INDEX_NAME)
    out = pd.DataFrame(
        {
            "label": np.array([], dtype=object),
            "actual": np.array([], dtype=float),
            "predicted": np.array([], dtype=float),
            "deviation_pct": np.array([], dtype=float),
        },
        index=idx,
    )
    return utils.as_energy_frame(out)


def aggregate_and_find_anomalies(
    df: EnergyFrame,
    window_hours: int,
    reference_time: Optional[pd.Timestamp] = None,
    *,
    tz: Optional[str] = None,
    threshold: float = canon.ANOMALY_THRESHOLD,
) -> EnergyFrame:
    """
    Turn a building series into a display-ready, anomaly-annotated frame.

    - window_hours in (168, 720): daily buckets (see bucket_daily)
    - any other window: hourly points passed through with an 'HH:MM' label

    Returns columns ['label', 'actual', 'predicted', 'deviation_pct'], ascending
    by time. Empty input or an empty window yields an empty frame.

    Example:
        view = aggregate_and_find_anomalies(series, 24, clock.reference_time)
    """
    if df is None or df.empty:
        return _empty_annotated(tz or canon.DEFAULT_TZ)
    out_tz = tz or df.index.tz

    window = filter_window(df, window_hours, reference_time)
    if window.empty:
        return _empty_annotated(out_tz)

    if utils.is_bucketed_window(window_hours):
        shaped = bucket_daily(window, window_hours, tz)
    else:
        local = utils.local_index(pd.DatetimeIndex(window.index), tz)
        shaped = pd.DataFrame(
            {
                "label": utils.hour_labels(local),
                "actual": window["actual"].to_numpy(dtype=float),
                "predicted": window["predicted"].to_numpy(dtype=float),
            },
            index=local.rename(canon.INDEX_NAME),
        )

    out = annotate_anomalies(shaped, threshold)
    return cast(EnergyFrame, utils.as_energy_frame(out[ANNOTATED_COLS]))
