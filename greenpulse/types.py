from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional
from datetime import datetime

import pandas as pd
from pydantic import BaseModel, ConfigDict, PositiveInt

from . import canon


# Energy DataFrame
class EnergyFrame(pd.DataFrame):
    """
    Strongly-typed building series dataframe.

    Expected:
      - DatetimeIndex named 'timestamp', tz-aware, strictly increasing
      - Columns: ['actual', 'predicted'] as float kWh (NaN when absent)

    Annotated output additionally carries 'label' and 'deviation_pct'.
    """

    @property
    def _constructor(self):
        return EnergyFrame


## API payloads
class BuildingRecord(BaseModel):
    """One row of GET /building/{id}."""

    model_config = ConfigDict(extra="allow")

    timestamp: str
    meter_reading: Optional[float] = None
    predicted_meter_reading: Optional[float] = None
    building_id: Optional[int] = None
    meter: Optional[int] = None
    site_id: Optional[int] = None
    primary_use: Optional[str] = None
    square_feet: Optional[float] = None
    year_built: Optional[int] = None
    floor_count: Optional[int] = None
    air_temperature: Optional[float] = None
    cloud_coverage: Optional[float] = None
    dew_temperature: Optional[float] = None
    sea_level_pressure: Optional[float] = None
    wind_speed: Optional[float] = None
    hour: Optional[int] = None
    day_of_week: Optional[int] = None
    month: Optional[int] = None


class PredictRequest(BaseModel):
    building_id: int
    user_params: Dict[str, Any]
    predict_hours: Optional[int] = None
    seq_length: Optional[int] = None


class SuggestRequest(BaseModel):
    building_id: int
    user_params: Dict[str, Any]
    target_usage: float
    param_candidates: Optional[List[str]] = None
    seq_length: Optional[int] = None


## Simulation clock
class SimulationRate(BaseModel):
    """Playback speed: advance hours_per_tick points every interval_ms."""

    model_config = ConfigDict(frozen=True)

    hours_per_tick: PositiveInt = canon.DEFAULT_HOURS_PER_TICK
    interval_ms: PositiveInt = canon.DEFAULT_INTERVAL_MS


class ClockState(str, Enum):
    LOADING = "loading"
    PAUSED = "paused"
    RUNNING = "running"
    ERROR = "error"


## Reports
class ConsumptionMark(BaseModel):
    value: float
    time: Optional[datetime] = None


class ReportSummary(BaseModel):
    building_id: int
    start: datetime
    end: datetime
    total_actual_kwh: float
    total_predicted_kwh: float
    net_savings_kwh: float  # predicted - actual
    average_actual_kwh: Optional[float] = None
    peak_consumption: Optional[ConsumptionMark] = None
    lowest_consumption: Optional[ConsumptionMark] = None
    anomaly_count: int = 0
