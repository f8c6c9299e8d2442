"""
Simulation clock: a virtual "now" that plays through a building's history.

One clock owns the selected building's series and its reference time.
Consumers get the clock passed in and either read `reference_time` or
`subscribe()` to be called on every change. Playback is a single asyncio
task; every transition cancels the previous task before starting another.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

import pandas as pd

from . import exceptions, transform, utils, validate
from .config import GreenPulseConfig, default_config
from .service import BuildingDataClient
from .types import ClockState, EnergyFrame, SimulationRate

logger = logging.getLogger(__name__)

Loader = Callable[[int], Awaitable[EnergyFrame]]
Listener = Callable[[pd.Timestamp], None]


def threaded_loader(client: BuildingDataClient) -> Loader:
    """Wrap the blocking HTTP client so loads don't stall the event loop."""

    async def load(building_id: int) -> EnergyFrame:
        return await asyncio.to_thread(client.fetch_building_frame, building_id)

    return load


class SimulationClock:
    def __init__(
        self,
        loader: Optional[Loader] = None,
        *,
        rate: Optional[SimulationRate] = None,
        config: Optional[GreenPulseConfig] = None,
    ):
        self._config = config or default_config()
        self._client: Optional[BuildingDataClient] = None
        if loader is None:
            self._client = BuildingDataClient.from_config(self._config)
            loader = threaded_loader(self._client)
        self._loader = loader
        self._rate = rate or self._config.rate
        self._tz = self._config.display.tz

        self._building_id: Optional[int] = None
        self._series: EnergyFrame = utils.empty_energy_frame(self._tz)
        self._reference_time: Optional[pd.Timestamp] = None
        self._state = ClockState.LOADING
        self._error: Optional[str] = None
        self._failure: Optional[exceptions.GreenPulseError] = None

        self._generation = 0
        self._timer: Optional[asyncio.Task] = None
        self._listeners: List[Listener] = []

    # Read-only view
    @property
    def building_id(self) -> Optional[int]:
        return self._building_id

    @property
    def state(self) -> ClockState:
        return self._state

    @property
    def paused(self) -> bool:
        return self._state is not ClockState.RUNNING

    @property
    def loading(self) -> bool:
        return self._state is ClockState.LOADING

    @property
    def rate(self) -> SimulationRate:
        return self._rate

    @property
    def series(self) -> EnergyFrame:
        return self._series

    @property
    def reference_time(self) -> Optional[pd.Timestamp]:
        return self._reference_time

    @property
    def series_start(self) -> Optional[pd.Timestamp]:
        return self._series.index[0] if self._is_ready() else None

    @property
    def series_end(self) -> Optional[pd.Timestamp]:
        return self._series.index[-1] if self._is_ready() else None

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def failure(self) -> Optional[exceptions.GreenPulseError]:
        return self._failure

    def _is_ready(self) -> bool:
        return self._state in (ClockState.PAUSED, ClockState.RUNNING) and not self._series.empty

    # Observers
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener(reference_time) on every change; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_reference_time(self, ts: Optional[pd.Timestamp]) -> None:
        self._reference_time = ts
        if ts is None:
            return
        for listener in list(self._listeners):
            try:
                listener(ts)
            except Exception:
                logger.exception("Clock listener %r failed", listener)

    # Loading
    async def select_building(self, building_id: int) -> None:
        """Switch to building_id and load its series. No-op when already selected."""
        if building_id == self._building_id:
            return
        self._building_id = building_id
        await self._load(building_id)

    async def reload(self) -> None:
        """Load the current building again, e.g. after a failure."""
        if self._building_id is not None:
            await self._load(self._building_id)

    async def _load(self, building_id: int) -> None:
        self._cancel_timer()
        self._generation += 1
        generation = self._generation

        self._state = ClockState.LOADING
        self._series = utils.empty_energy_frame(self._tz)
        self._reference_time = None
        self._error = None
        self._failure = None
        logger.info("Loading building %s", building_id)

        failure: Optional[exceptions.GreenPulseError] = None
        series: Optional[EnergyFrame] = None
        try:
            series = await self._loader(building_id)
            if series is not None and not series.empty:
                validate.assert_series(series)
        except exceptions.HttpStatusError as e:
            failure = exceptions.HttpStatusError(
                f"Failed to fetch building data for building {building_id}: {e}",
                status_code=e.status_code,
            )
        except (exceptions.NetworkFailure, ConnectionError, TimeoutError) as e:
            failure = exceptions.NetworkFailure(
                f"Could not reach the data service for building {building_id}: {e}"
            )
        except (exceptions.InvalidResponse, exceptions.SeriesError) as e:
            failure = exceptions.InvalidResponse(
                f"Received invalid data for building {building_id}: {e}"
            )
        except exceptions.GreenPulseError as e:
            failure = e
        except Exception as e:
            logger.exception("Loader failed for building %s", building_id)
            failure = exceptions.InvalidResponse(
                f"Received invalid data for building {building_id}: {e}"
            )

        if generation != self._generation:
            logger.debug("Discarding stale load for building %s", building_id)
            return

        if failure is None and (series is None or series.empty):
            failure = exceptions.DataUnavailable(f"No data available for building {building_id}.")

        if failure is not None:
            logger.warning("Building %s unavailable: %s", building_id, failure)
            self._series = utils.empty_energy_frame(self._tz)
            self._error = str(failure)
            self._failure = failure
            self._state = ClockState.ERROR
            return

        self._series = series
        self._state = ClockState.PAUSED
        logger.info(
            "Building %s ready: %d points, %s to %s",
            building_id,
            len(series),
            series.index[0],
            series.index[-1],
        )
        self._set_reference_time(series.index[0])

    # Playback
    def toggle_play_pause(self) -> None:
        """Flip PAUSED <-> RUNNING. Must be called from the running event loop."""
        if self._state is ClockState.PAUSED:
            self._start_timer(self._rate)
            self._state = ClockState.RUNNING
        elif self._state is ClockState.RUNNING:
            self._cancel_timer()
            self._state = ClockState.PAUSED

    def seek(self, time) -> None:
        """Clamp time into the series bounds, jump there and pause."""
        start, end = self.series_start, self.series_end
        if start is None or end is None:
            return
        ts = utils.to_timestamp(time, start.tz)
        clamped = min(max(ts, start), end)
        self._cancel_timer()
        self._state = ClockState.PAUSED
        self._set_reference_time(clamped)

    def set_rate(self, rate: SimulationRate) -> None:
        if self._state is ClockState.RUNNING:
            self._start_timer(rate)
        self._rate = rate

    def advance(self) -> None:
        """One tick: move hours_per_tick points ahead, looping back to the start."""
        if self._series.empty or self._reference_time is None:
            return
        idx = pd.DatetimeIndex(self._series.index)
        current = int(idx.searchsorted(self._reference_time, side="left"))
        if current >= len(idx):
            nxt = 0
        else:
            nxt = (current + self._rate.hours_per_tick) % len(idx)
        self._set_reference_time(idx[nxt])

    def _start_timer(self, rate: SimulationRate) -> None:
        # raises RuntimeError outside a running loop, before any state changes
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._tick_loop(rate.interval_ms / 1000.0))
        self._cancel_timer()
        self._timer = task

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _tick_loop(self, interval_s: float) -> None:
        while True:
            await asyncio.sleep(interval_s)
            self.advance()

    # Views
    def window(self, window_hours: int) -> EnergyFrame:
        """Annotated view of the window ending at the current reference time."""
        return transform.aggregate_and_find_anomalies(
            self._series,
            window_hours,
            self._reference_time,
            tz=self._tz,
            threshold=self._config.display.anomaly_threshold,
        )

    def close(self) -> None:
        self._cancel_timer()
        if self._client is not None:
            self._client.close()
            self._client = None

    async def __aenter__(self) -> "SimulationClock":
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()
