from __future__ import annotations
from typing import Final, Dict

INDEX_NAME: Final[str] = "timestamp"
REQUIRED_COLS: Final[list[str]] = ["actual", "predicted"]
DEFAULT_TZ: Final[str] = "UTC"
COMMON_TIMESTAMP_NAMES = ("timestamp", "t_start", "time", "ts", "datetime", "date")

# API record field → frame column
FIELD_MAP: Dict[str, str] = {
    "meter_reading": "actual",
    "predicted_meter_reading": "predicted",
}

ANOMALY_THRESHOLD: Final[float] = 0.20

# Window sizes that switch on daily bucketing
WEEK_HOURS: Final[int] = 168
MONTH_HOURS: Final[int] = 720

WEEKDAY_LABEL_FORMAT: Final[str] = "%a"  # Mon
HOURLY_LABEL_FORMAT: Final[str] = "%H:%M"

API_BASE_URL: Final[str] = "https://green-pulse.onrender.com"
DEFAULT_TIMEOUT_S: Final[float] = 10.0
DEFAULT_HOURS_PER_TICK: Final[int] = 1
DEFAULT_INTERVAL_MS: Final[int] = 10_000
LEADERBOARD_WINDOW_HOURS: Final[int] = 24
