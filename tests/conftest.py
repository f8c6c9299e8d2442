import numpy as np
import pandas as pd
import pytest

from greenpulse import utils

TZ = "UTC"


@pytest.fixture
def hourly_rng():
    # 30 days from a Monday
    return pd.date_range("2025-01-06", periods=24 * 30, freq="h", tz=TZ)


@pytest.fixture
def flat_series(hourly_rng):
    """Every hour actual == predicted == 50 kWh."""
    n = len(hourly_rng)
    return utils.build_energy_frame(hourly_rng, np.full(n, 50.0), np.full(n, 50.0))


@pytest.fixture
def make_series():
    """Build an EnergyFrame from a start time and actual/predicted lists."""

    def _make(actual, predicted, start="2025-01-06", freq="h", tz=TZ):
        idx = pd.date_range(start, periods=len(actual), freq=freq, tz=tz)
        return utils.build_energy_frame(idx, actual, predicted)

    return _make


@pytest.fixture
def api_records():
    # Out of order, one duplicate timestamp, one row with no readings
    return [
        {"timestamp": "2025-01-06 02:00:00", "meter_reading": 40.0, "predicted_meter_reading": 42.0, "building_id": 7},
        {"timestamp": "2025-01-06 00:00:00", "meter_reading": 45.2, "predicted_meter_reading": 48.5, "building_id": 7},
        {"timestamp": "2025-01-06 01:00:00", "meter_reading": None, "predicted_meter_reading": None, "building_id": 7},
        {"timestamp": "2025-01-06 03:00:00", "meter_reading": None, "predicted_meter_reading": 41.0, "building_id": 7},
        {"timestamp": "2025-01-06 02:00:00", "meter_reading": 39.0, "predicted_meter_reading": 42.0, "building_id": 7},
    ]
