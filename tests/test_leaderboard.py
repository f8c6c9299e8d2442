import numpy as np
import pandas as pd

from greenpulse import leaderboard, utils


def _frame(actual, predicted):
    idx = pd.date_range("2025-01-06", periods=len(actual), freq="h", tz="UTC")
    return utils.build_energy_frame(idx, actual, predicted)


def test_cumulative_savings_ranks_by_savings():
    frames = {
        1: _frame([50.0] * 48, [50.0] * 48),  # break-even
        2: _frame([40.0] * 48, [50.0] * 48),  # saves 10/h
        3: _frame([60.0] * 48, [50.0] * 48),  # overspends 10/h
    }
    end = frames[1].index[-1]
    out = leaderboard.cumulative_savings(frames, end)

    assert list(out["building_id"]) == [2, 1, 3]
    assert list(out["rank"]) == [1, 2, 3]
    # trailing 24h window is inclusive at both ends: 25 hourly points
    assert out.loc[0, "cumulative_net_savings"] == 250.0


def test_cumulative_savings_skips_incomplete_hours_and_empty_frames():
    frames = {
        5: _frame([40.0, np.nan], [50.0, 50.0]),
        4: utils.empty_energy_frame("UTC"),
    }
    out = leaderboard.cumulative_savings(frames, pd.Timestamp("2025-01-06 01:00", tz="UTC"))
    assert list(out["building_id"]) == [5, 4]
    assert out["cumulative_net_savings"].tolist() == [10.0, 0.0]


def test_cumulative_savings_no_buildings():
    out = leaderboard.cumulative_savings({}, "2025-01-06")
    assert out.empty
    assert list(out.columns) == ["rank", "building_id", "cumulative_net_savings"]
