"""
Refresh pipeline - keeps the dashboard forecast current.

One refresh cycle:
1. Fetch: flight, parking and traffic signals concurrently
2. Forecast: LIVE from the signals, FALLBACK if any source failed
3. Recommend: best/avoid hours derived from the new forecast
4. Publish: swap the result into the dashboard cache
5. Learn: record the current hour in the historical store (LIVE only,
   at most once per clock hour)

Cycles are triggered by a warm-up shortly after start, a periodic timer
on a background thread, and on-demand requests from the API. All of
them go through refresh(), which skips a request while another cycle
is still running.
"""

import asyncio
import logging
import threading
import time
from datetime import date
from typing import Optional, Tuple

from airportpulse.config import config, RefreshConfig
from airportpulse.models import ForecastMode, HistoricalTrendPoint, record_value
from airportpulse.analytics import (
    CongestionForecaster,
    ForecastRun,
    HistoricalTrendStore,
    derive_travel_recommendation,
    parking_pressure_score,
)
from airportpulse.analytics.scoring import congestion_for_flights, round_half_up
from airportpulse.cache import DashboardCache, dashboard_cache

logger = logging.getLogger(__name__)


class RefreshPipeline:
    """
    Manages the forecast refresh lifecycle.

    Can run as a background thread for periodic refreshes; on-demand
    callers share the same in-flight guard.
    """

    def __init__(
        self,
        forecaster: CongestionForecaster,
        cache: Optional[DashboardCache] = None,
        store: Optional[HistoricalTrendStore] = None,
        settings: Optional[RefreshConfig] = None,
        learning_enabled: Optional[bool] = None,
    ):
        """
        Initialize the refresh pipeline.

        Args:
            forecaster: Congestion forecaster with its signal sources
            cache: Dashboard cache to publish into (singleton if None)
            store: Historical store fed by the learning hook (optional)
            settings: Refresh timing (config.refresh if None)
            learning_enabled: Override HISTORY_LEARNING_ENABLED
        """
        self.forecaster = forecaster
        self.cache = cache if cache is not None else dashboard_cache
        self.store = store
        self.settings = settings or config.refresh
        self.learning_enabled = (
            config.history.learning_enabled if learning_enabled is None else learning_enabled
        )

        # Guards a single in-flight cycle
        self._refresh_lock = threading.Lock()

        # Background loop state
        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        # Statistics
        self._refresh_count = 0
        self._fallback_count = 0
        self._skipped_count = 0
        self._error_count = 0
        self._learned_count = 0
        self._last_refresh_time: float = 0
        self._last_duration_ms: float = 0
        self._last_learned_slot: Optional[Tuple[date, int]] = None

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_lock.locked()

    async def refresh_cycle(self) -> ForecastRun:
        """Run one full cycle and publish its result."""
        run = await self.forecaster.run_forecast()
        recommendation = derive_travel_recommendation(run.entries)

        self.cache.update(run, recommendation)

        if run.mode == ForecastMode.FALLBACK:
            self._fallback_count += 1

        self._learn(run)
        return run

    def refresh(self) -> Optional[ForecastRun]:
        """
        Execute one refresh cycle unless another one is in progress.

        Returns the published ForecastRun, or None when skipped. Errors
        escaping the cycle are counted and re-raised.
        """
        if not self._refresh_lock.acquire(blocking=False):
            self._skipped_count += 1
            logger.info('Refresh already in progress, skipping')
            return None

        start_time = time.perf_counter()
        try:
            run = asyncio.run(self.refresh_cycle())
        except Exception as e:
            self._error_count += 1
            logger.error(f'Refresh cycle failed: {e}')
            raise
        finally:
            self._refresh_lock.release()

        self._refresh_count += 1
        self._last_refresh_time = time.time()
        self._last_duration_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            f'Refresh complete: {len(run.entries)} hours ({run.mode.value}) '
            f'in {self._last_duration_ms:.0f}ms'
        )
        return run

    def _learn(self, run: ForecastRun) -> Optional[HistoricalTrendPoint]:
        """
        Feed the current hour of a LIVE run into the historical store.

        The stored congestion score is derived from the estimated flight
        count on the same scale as the synthetic baseline, not taken from
        the blended forecast bar height.

        Learning failures are logged and counted; they never fail the cycle.
        """
        if self.store is None or not self.learning_enabled:
            return None
        if run.mode != ForecastMode.LIVE or not run.entries or run.signals is None:
            return None

        slot = (run.generated_at.date(), run.generated_at.hour)
        if slot == self._last_learned_slot:
            return None

        current = run.entries[0]
        delays = [record_value(f, 'delay_minutes', 'delayMinutes') or 0 for f in run.signals.flights]
        avg_delay = round_half_up(sum(delays) / len(delays)) if delays else 0

        try:
            point = self.store.add_historical_data_point(
                hour=current.hour,
                flight_count=current.flight_count,
                avg_delay_minutes=avg_delay,
                congestion_score=congestion_for_flights(current.flight_count),
                parking_occupancy=parking_pressure_score(run.signals.parking),
            )
        except ValueError as e:
            self._error_count += 1
            logger.error(f'Learning hook rejected observation: {e}')
            return None

        self._last_learned_slot = slot
        self._learned_count += 1
        return point

    def run_continuous(
        self,
        interval: Optional[float] = None,
        warmup: Optional[float] = None,
    ) -> None:
        """
        Refresh after a short warm-up, then every `interval` seconds.

        This method blocks - use start_background() for non-blocking.
        """
        interval = interval if interval is not None else self.settings.interval_seconds
        warmup = warmup if warmup is not None else self.settings.warmup_seconds
        self._running = True

        logger.info(f'Starting refresh loop (warmup={warmup}s, interval={interval}s)')

        stopped = self._stop_event.wait(warmup)
        while not stopped:
            try:
                self.refresh()
            except Exception as e:
                logger.warning(f'Refresh loop continuing after error: {e}')
            stopped = self._stop_event.wait(interval)

        self._running = False
        logger.info('Refresh loop stopped')

    def start_background(
        self,
        interval: Optional[float] = None,
        warmup: Optional[float] = None,
    ) -> None:
        """Start the refresh loop in a background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning('Refresh loop already running')
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_continuous,
            args=(interval, warmup),
            daemon=True,
        )
        self._thread.start()
        logger.info('Background refresh started')

    def stop(self) -> None:
        """Stop the background refresh loop."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5)
        self._running = False

    @property
    def stats(self) -> dict:
        """Get refresh statistics."""
        return {
            'refresh_count': self._refresh_count,
            'fallback_count': self._fallback_count,
            'skipped_count': self._skipped_count,
            'error_count': self._error_count,
            'learned_count': self._learned_count,
            'last_refresh_time': self._last_refresh_time,
            'last_duration_ms': round(self._last_duration_ms, 2),
            'last_mode': self.forecaster.last_mode.value if self.forecaster.last_mode else None,
            'refreshing': self.is_refreshing,
            'running': self._running,
        }
