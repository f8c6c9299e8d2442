from __future__ import annotations
import pandas as pd
from typing import Optional

from . import canon, transform, utils
from .types import ConsumptionMark, EnergyFrame, ReportSummary


def _mark(s: pd.Series, pos: int) -> ConsumptionMark:
    return ConsumptionMark(value=float(s.iloc[pos]), time=s.index[pos].to_pydatetime())


def summarise_report(
    df: EnergyFrame,
    building_id: int,
    start,
    end,
    *,
    threshold: float = canon.ANOMALY_THRESHOLD,
) -> ReportSummary:
    """
    Report statistics for start <= t <= end.

    Totals treat missing readings as 0 kWh. Peak/lowest consider only
    measured points; anomalies use the same deviation rule as the charts.
    """
    tz = df.index.tz if getattr(df.index, "tz", None) else canon.DEFAULT_TZ
    t0 = utils.to_timestamp(start, tz)
    t1 = utils.to_timestamp(end, tz)
    sel = df.loc[(df.index >= t0) & (df.index <= t1)] if len(df) else df

    actual = sel["actual"].astype(float)
    predicted = sel["predicted"].astype(float)
    total_actual = float(actual.sum())
    total_predicted = float(predicted.sum())

    measured = actual.dropna()
    peak = lowest = None
    avg: Optional[float] = None
    if len(measured):
        values = measured.to_numpy()
        peak = _mark(measured, int(values.argmax()))
        lowest = _mark(measured, int(values.argmin()))
        avg = float(values.mean())

    dev = transform.deviation(actual, predicted)
    anomalies = int((dev.abs() > threshold).sum())

    return ReportSummary(
        building_id=building_id,
        start=t0.to_pydatetime(),
        end=t1.to_pydatetime(),
        total_actual_kwh=total_actual,
        total_predicted_kwh=total_predicted,
        net_savings_kwh=total_predicted - total_actual,
        average_actual_kwh=avg,
        peak_consumption=peak,
        lowest_consumption=lowest,
        anomaly_count=anomalies,
    )


def _fmt_mark(mark: Optional[ConsumptionMark]) -> str:
    if mark is None:
        return "n/a"
    when = mark.time.strftime("%Y-%m-%d %H:%M") if mark.time else "unknown time"
    return f"{mark.value:,.1f} kWh at {when}"


def render_report_prompt(
    summary: ReportSummary, threshold: float = canon.ANOMALY_THRESHOLD
) -> str:
    """Plain-text digest handed to the report/chat assistant."""
    avg = (
        f"{summary.average_actual_kwh:,.1f} kWh"
        if summary.average_actual_kwh is not None
        else "n/a"
    )
    verdict = "saved" if summary.net_savings_kwh >= 0 else "overspent"
    lines = [
        f"Energy report for building {summary.building_id}",
        f"Period: {summary.start:%Y-%m-%d} to {summary.end:%Y-%m-%d}",
        f"Total actual consumption: {summary.total_actual_kwh:,.1f} kWh",
        f"Total predicted consumption: {summary.total_predicted_kwh:,.1f} kWh",
        f"Net savings: {summary.net_savings_kwh:,.1f} kWh ({verdict} against baseline)",
        f"Peak consumption: {_fmt_mark(summary.peak_consumption)}",
        f"Lowest consumption: {_fmt_mark(summary.lowest_consumption)}",
        f"Average hourly consumption: {avg}",
        f"Anomalies detected (>{threshold:.0%} deviation): {summary.anomaly_count}",
    ]
    return "\n".join(lines)
