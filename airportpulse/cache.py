"""
In-memory dashboard state for low-latency API reads.

Holds the output of the most recent refresh cycle:
- the forecast run (entries, mode, signals)
- the travel recommendation derived from it
- when it was published

Each refresh replaces the whole state atomically, so readers never see
entries from one run next to a recommendation from another.
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Optional

from airportpulse.models import TravelRecommendation
from airportpulse.analytics import ForecastRun

logger = logging.getLogger(__name__)


class DashboardCache:
    """Thread-safe holder for the latest forecast and recommendation."""

    def __init__(self):
        self._run: Optional[ForecastRun] = None
        self._recommendation: Optional[TravelRecommendation] = None
        self._updated_at: Optional[datetime] = None
        self._lock = threading.RLock()
        self._last_refresh: float = 0

        # Statistics
        self._updates = 0
        self._hits = 0
        self._misses = 0

    def update(self, run: ForecastRun, recommendation: TravelRecommendation) -> None:
        """Publish a new forecast run, replacing the previous one."""
        with self._lock:
            self._run = run
            self._recommendation = recommendation
            self._updated_at = datetime.now(timezone.utc)
            self._last_refresh = time.time()
            self._updates += 1

        logger.debug(f'Dashboard cache updated with {len(run.entries)} forecast hours')

    def get_forecast(self) -> Optional[ForecastRun]:
        """Latest forecast run, or None before the first refresh."""
        with self._lock:
            if self._run is None:
                self._misses += 1
            else:
                self._hits += 1
            return self._run

    def get_recommendation(self) -> Optional[TravelRecommendation]:
        with self._lock:
            return self._recommendation

    @property
    def updated_at(self) -> Optional[datetime]:
        with self._lock:
            return self._updated_at

    def snapshot(self) -> dict:
        """
        JSON-serializable view of the current state.

        Returns an empty forecast with mode None before the first refresh.
        """
        with self._lock:
            run = self._run
            recommendation = self._recommendation
            updated_at = self._updated_at

        return {
            'forecast': [e.to_dict() for e in run.entries] if run else [],
            'mode': run.mode.value if run else None,
            'error': run.error if run else None,
            'recommendation': recommendation.to_dict() if recommendation else None,
            'signals': run.signals.to_dict() if run and run.signals else None,
            'generatedAt': run.generated_at.isoformat() if run else None,
            'updatedAt': updated_at.isoformat() if updated_at else None,
        }

    def clear(self) -> None:
        """Drop the cached state."""
        with self._lock:
            self._run = None
            self._recommendation = None
            self._updated_at = None

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            return {
                'has_forecast': self._run is not None,
                'updates': self._updates,
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': self._hits / (self._hits + self._misses) if (self._hits + self._misses) > 0 else 0,
                'last_refresh': self._last_refresh,
            }


# Singleton instance
dashboard_cache = DashboardCache()
