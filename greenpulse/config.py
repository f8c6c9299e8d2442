from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from . import canon
from .types import SimulationRate


@dataclass
class ApiConfig:
    base_url: str = canon.API_BASE_URL
    timeout_s: float = canon.DEFAULT_TIMEOUT_S


@dataclass
class DisplayConfig:
    # Viewer's wall-clock zone for labels and day buckets
    tz: str = canon.DEFAULT_TZ
    anomaly_threshold: float = canon.ANOMALY_THRESHOLD  # fraction, strict >


@dataclass
class GreenPulseConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    rate: SimulationRate = field(default_factory=SimulationRate)


def default_config() -> GreenPulseConfig:
    return GreenPulseConfig()


def from_env(environ: Optional[Mapping[str, str]] = None) -> GreenPulseConfig:
    """
    Build a config from GREENPULSE_* variables, falling back to defaults:
      GREENPULSE_API_URL, GREENPULSE_TIMEOUT_S, GREENPULSE_TZ,
      GREENPULSE_ANOMALY_THRESHOLD, GREENPULSE_HOURS_PER_TICK, GREENPULSE_INTERVAL_MS
    """
    env = os.environ if environ is None else environ
    return GreenPulseConfig(
        api=ApiConfig(
            base_url=env.get("GREENPULSE_API_URL", canon.API_BASE_URL).rstrip("/"),
            timeout_s=float(env.get("GREENPULSE_TIMEOUT_S", canon.DEFAULT_TIMEOUT_S)),
        ),
        display=DisplayConfig(
            tz=env.get("GREENPULSE_TZ", canon.DEFAULT_TZ),
            anomaly_threshold=float(
                env.get("GREENPULSE_ANOMALY_THRESHOLD", canon.ANOMALY_THRESHOLD)
            ),
        ),
        rate=SimulationRate(
            hours_per_tick=int(
                env.get("GREENPULSE_HOURS_PER_TICK", canon.DEFAULT_HOURS_PER_TICK)
            ),
            interval_ms=int(env.get("GREENPULSE_INTERVAL_MS", canon.DEFAULT_INTERVAL_MS)),
        ),
    )
