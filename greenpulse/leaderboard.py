from __future__ import annotations
import pandas as pd
from typing import Mapping

from . import canon, utils
from .types import EnergyFrame


def cumulative_savings(
    frames: Mapping[int, EnergyFrame],
    end_time,
    *,
    window_hours: int = canon.LEADERBOARD_WINDOW_HOURS,
) -> pd.DataFrame:
    """
    Rank buildings by net savings (predicted - actual kWh) over the trailing window.

    Only hours with both readings count. Buildings with no usable hours
    score 0.0. Returns columns ['rank', 'building_id', 'cumulative_net_savings'],
    rank 1 = largest savings; ties keep building_id order.
    """
    rows = []
    for building_id, df in frames.items():
        savings = 0.0
        if df is not None and not df.empty:
            end = utils.to_timestamp(end_time, df.index.tz)
            start = end - pd.Timedelta(hours=window_hours)
            win = df.loc[(df.index >= start) & (df.index <= end)]
            both = win.dropna(subset=["actual", "predicted"])
            savings = float((both["predicted"] - both["actual"]).sum())
        rows.append({"building_id": building_id, "cumulative_net_savings": savings})

    out = pd.DataFrame(rows, columns=["building_id", "cumulative_net_savings"])
    if out.empty:
        return out.assign(rank=pd.Series(dtype=int))[["rank", "building_id", "cumulative_net_savings"]]
    out = (
        out.sort_values("building_id", kind="stable")
        .sort_values("cumulative_net_savings", ascending=False, kind="stable")
        .reset_index(drop=True)
    )
    out.insert(0, "rank", range(1, len(out) + 1))
    return out
