"""Tests for report statistics and the assistant prompt."""

import numpy as np
import pandas as pd
import pytest

import greenpulse as gp


def test_summarise_report_totals_and_marks(make_series):
    df = make_series([10.0, 40.0, np.nan, 5.0], [10.0, 20.0, 10.0, 10.0])
    s = gp.summary.summarise_report(df, 7, df.index[0], df.index[-1])

    assert s.building_id == 7
    assert s.total_actual_kwh == pytest.approx(55.0)
    assert s.total_predicted_kwh == pytest.approx(50.0)
    assert s.net_savings_kwh == pytest.approx(-5.0)
    assert s.average_actual_kwh == pytest.approx(55.0 / 3)
    assert s.peak_consumption.value == 40.0
    assert pd.Timestamp(s.peak_consumption.time) == df.index[1]
    assert s.lowest_consumption.value == 5.0
    # 40 vs 20 (+100%) and 5 vs 10 (-50%)
    assert s.anomaly_count == 2


def test_summarise_report_respects_range(flat_series):
    start = flat_series.index[24]
    end = flat_series.index[47]
    s = gp.summary.summarise_report(flat_series, 1, start, end)
    assert s.total_actual_kwh == pytest.approx(24 * 50.0)
    assert s.anomaly_count == 0


def test_summarise_report_empty_range(flat_series):
    s = gp.summary.summarise_report(flat_series, 1, "2030-01-01", "2030-01-02")
    assert s.total_actual_kwh == 0.0
    assert s.peak_consumption is None and s.lowest_consumption is None


def test_render_report_prompt_mentions_key_stats(make_series):
    df = make_series([10.0, 40.0, 5.0], [10.0, 20.0, 10.0])
    s = gp.summary.summarise_report(df, 3, df.index[0], df.index[-1])
    text = gp.summary.render_report_prompt(s)

    assert "building 3" in text
    assert "Peak consumption: 40.0 kWh" in text
    assert "Lowest consumption: 5.0 kWh" in text
    assert "Anomalies detected (>20% deviation): 2" in text
    assert "overspent" in text
