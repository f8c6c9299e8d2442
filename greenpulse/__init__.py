from . import (
    canon,
    exceptions,
    types,
    utils,
    config,
    ingest,
    validate,
    transform,
    summary,
    leaderboard,
    service,
    clock,
)
from .clock import SimulationClock
from .transform import aggregate_and_find_anomalies

__all__ = [
    "canon",
    "exceptions",
    "types",
    "utils",
    "config",
    "ingest",
    "validate",
    "transform",
    "summary",
    "leaderboard",
    "service",
    "clock",
    "SimulationClock",
    "aggregate_and_find_anomalies",
]
