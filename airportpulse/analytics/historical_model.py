"""
Historical model - the 90-day hourly baseline behind trend queries.

No real historical store exists yet, so the baseline is synthesized from
the hourly base-load table with these adjustments, applied in order and
composed multiplicatively:

1. Weekend: Friday through Sunday carry +15% traffic
2. Monday: +8% for business travel
3. Peak travel: +25% inside a holiday/summer window (flagged special_event)
4. Weather: one draw per point, 10% chance of rain or fog cutting 30%
5. Jitter: uniform +/-15%

The resulting series is held by HistoricalTrendStore, an explicitly owned
repository that tests can seed or replace. New observations can be added
at runtime; every write prunes points older than the retention window.

Randomness comes from an injectable random.Random-compatible source so a
seeded or scripted generator makes the model reproducible.
"""

import logging
import random
import threading
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional, Union

from airportpulse.config import config, HistoryConfig
from airportpulse.models import HistoricalTrendPoint, WeatherCondition, sunday_based_weekday
from airportpulse.analytics.patterns import base_flights_for_hour, is_peak_travel_date
from airportpulse.analytics.scoring import clamp, clamp_score, congestion_for_flights, round_half_up

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

WEEKEND_DAYS = (0, 5, 6)  # Sunday, Friday, Saturday
MONDAY = 1


class HistoricalDataGenerator:
    """
    Synthesizes plausible hourly airport activity.

    Configuration:
    - rng: random source (default: unseeded random.Random)
    - settings: multipliers and ranges (default: config.history)
    - clock: returns "now"; the series ends the day before clock().date()
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        settings: Optional[HistoryConfig] = None,
        clock: Optional[Clock] = None,
    ):
        self.rng = rng or random.Random()
        self.settings = settings or config.history
        self.clock = clock or datetime.now

    def generate(self, days: Optional[int] = None) -> List[HistoricalTrendPoint]:
        """
        Generate 24 points per day for the past `days` calendar days.

        Covers today - days through yesterday, oldest first.
        """
        days = days if days is not None else self.settings.window_days
        start = self.clock().date() - timedelta(days=days)

        points = []
        for offset in range(days):
            day = start + timedelta(days=offset)
            for hour in range(24):
                points.append(self.generate_point(day, hour))

        logger.info(f'Generated {len(points)} historical points over {days} days')
        return points

    def generate_point(self, day: date, hour: int) -> HistoricalTrendPoint:
        """Synthesize the observation for one date and hour."""
        s = self.settings
        day_of_week = sunday_based_weekday(day)

        flights = float(base_flights_for_hour(hour))

        if day_of_week in WEEKEND_DAYS:
            flights *= s.weekend_multiplier

        if day_of_week == MONDAY:
            flights *= s.monday_multiplier

        special_event = is_peak_travel_date(day)
        if special_event:
            flights *= s.peak_travel_multiplier

        weather = WeatherCondition.CLEAR
        if self.rng.random() < s.weather_probability:
            weather = WeatherCondition.RAIN if self.rng.random() < s.rain_share else WeatherCondition.FOG
            flights *= s.weather_impact

        flights *= self.rng.uniform(1 - s.jitter, 1 + s.jitter)
        flight_count = max(0, round_half_up(flights))

        congestion_score = self.congestion_for_flights(flight_count)
        parking_occupancy = clamp_score(40 + congestion_score * 0.5 + self.rng.uniform(0, 20))

        return HistoricalTrendPoint(
            date=day,
            hour=hour,
            day_of_week=day_of_week,
            flight_count=flight_count,
            avg_delay_minutes=self.delay_for_congestion(congestion_score),
            congestion_score=congestion_score,
            parking_occupancy=parking_occupancy,
            weather_condition=weather,
            special_event=special_event,
        )

    def congestion_for_flights(self, flight_count: int) -> int:
        """Scale a flight count so that `flight_capacity` flights = 100."""
        return congestion_for_flights(flight_count, self.settings.flight_capacity)

    def delay_for_congestion(self, congestion_score: int) -> int:
        """
        Draw an average delay from the range for this congestion band.

        >70: 15-35 min, >40: 5-20 min, else 0-8 min (upper bounds exclusive).
        """
        if congestion_score > 70:
            return self.rng.randrange(15, 35)
        elif congestion_score > 40:
            return self.rng.randrange(5, 20)
        return self.rng.randrange(0, 8)


class HistoricalTrendStore:
    """
    Owns the rolling window of historical observations.

    Reads return copies, so callers can filter freely. Writes (append,
    replace, prune) are serialized by a lock; there is a single logical
    writer in practice, the refresh pipeline's learning hook.
    """

    def __init__(
        self,
        points: Optional[Iterable[HistoricalTrendPoint]] = None,
        window_days: Optional[int] = None,
        clock: Optional[Clock] = None,
    ):
        self.window_days = window_days if window_days is not None else config.history.window_days
        self.clock = clock or datetime.now
        self._points: List[HistoricalTrendPoint] = list(points or [])
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._points)

    def all(self) -> List[HistoricalTrendPoint]:
        with self._lock:
            return list(self._points)

    def replace(self, points: Iterable[HistoricalTrendPoint]) -> None:
        """Swap in a new series wholesale (used at start-up and by tests)."""
        new_points = list(points)
        with self._lock:
            self._points = new_points
        logger.debug(f'Historical store replaced with {len(new_points)} points')

    def clear(self) -> None:
        with self._lock:
            self._points = []

    def cutoff_date(self, days: int) -> date:
        return self.clock().date() - timedelta(days=days)

    def recent(self, days: int = 30) -> List[HistoricalTrendPoint]:
        """Points dated within the last `days` days (inclusive of the cutoff)."""
        cutoff = self.cutoff_date(days)
        with self._lock:
            return [p for p in self._points if p.date >= cutoff]

    def matching(
        self,
        hour: Optional[int] = None,
        day_of_week: Optional[int] = None,
    ) -> List[HistoricalTrendPoint]:
        """Points matching the given hour and/or day of week."""
        with self._lock:
            return [
                p for p in self._points
                if (hour is None or p.hour == hour)
                and (day_of_week is None or p.day_of_week == day_of_week)
            ]

    def add_historical_data_point(
        self,
        hour: int,
        flight_count: int,
        avg_delay_minutes: int,
        congestion_score: int,
        parking_occupancy: int,
        weather_condition: Union[WeatherCondition, str] = WeatherCondition.CLEAR,
        special_event: bool = False,
    ) -> HistoricalTrendPoint:
        """
        Record a new observation stamped with today's date.

        Real-time learning hook: the point is appended, then everything
        older than the retention window (measured from now) is pruned.

        Raises:
            ValueError: hour outside 0-23 or unknown weather label
        """
        if not 0 <= int(hour) <= 23:
            raise ValueError(f'hour must be between 0 and 23, got {hour}')

        today = self.clock().date()
        point = HistoricalTrendPoint(
            date=today,
            hour=int(hour),
            day_of_week=sunday_based_weekday(today),
            flight_count=max(0, int(flight_count)),
            avg_delay_minutes=max(0, int(avg_delay_minutes)),
            congestion_score=int(clamp(int(congestion_score))),
            parking_occupancy=int(clamp(int(parking_occupancy))),
            weather_condition=WeatherCondition(weather_condition),
            special_event=bool(special_event),
        )

        with self._lock:
            self._points.append(point)
            removed = self._prune_locked()

        logger.debug(
            f'Added historical point {today.isoformat()} {point.hour:02d}:00 '
            f'(congestion={point.congestion_score}), pruned {removed}'
        )
        return point

    def prune(self) -> int:
        """Drop points older than the retention window. Returns count removed."""
        with self._lock:
            return self._prune_locked()

    def _prune_locked(self) -> int:
        cutoff = self.cutoff_date(self.window_days)
        before = len(self._points)
        self._points = [p for p in self._points if p.date >= cutoff]
        return before - len(self._points)


def create_historical_store(
    rng: Optional[random.Random] = None,
    clock: Optional[Clock] = None,
    settings: Optional[HistoryConfig] = None,
) -> HistoricalTrendStore:
    """Build a store seeded with a freshly generated baseline."""
    settings = settings or config.history
    generator = HistoricalDataGenerator(rng=rng, settings=settings, clock=clock)
    return HistoricalTrendStore(
        points=generator.generate(settings.window_days),
        window_days=settings.window_days,
        clock=clock,
    )
