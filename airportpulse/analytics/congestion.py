"""
Congestion forecast engine.

Blends three live signals into a 0-100 congestion score for each of the
next 12 hours:

    score = flight_traffic * 0.5 + parking_pressure * 0.3 + traffic * 0.2

Each signal scorer has a documented default for missing data, so an
empty source never stops a forecast. A source that raises does: the run
switches to FALLBACK mode, which scores hours with the time-of-day rule
alone. Both modes go through the same pipeline and the same banding,
so level and color always agree with bar_height.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional, Sequence

from airportpulse.config import config, ForecastConfig
from airportpulse.models import (
    CongestionForecastEntry,
    ForecastMode,
    SignalSnapshot,
    TravelRecommendation,
    record_value,
)
from airportpulse.analytics.patterns import base_flights_for_hour, fallback_range, flight_traffic_base
from airportpulse.analytics.scoring import band_for_score, clamp, clamp_score

logger = logging.getLogger(__name__)

DEFAULT_PARKING_SCORE = 50
DEFAULT_TRAFFIC_SCORE = 30

CONSTRUCTION_KEYWORDS = ('construction',)
DELAY_KEYWORDS = ('delay', 'slow')


# -----------------------------------------------------------------------------
# Signal scorers
# -----------------------------------------------------------------------------

def flight_traffic_score(hour: int, flights: Optional[Sequence[Any]]) -> int:
    """
    Score flight activity for an hour.

    Starts from the time-of-day band (morning peak 85, evening peak 90,
    midday 55, late night 20, otherwise 40) and adds +15 when live
    departures average more than 30 minutes late, +8 above 15 minutes.
    """
    score = flight_traffic_base(hour)

    if flights:
        delays = [record_value(f, 'delay_minutes', 'delayMinutes') or 0 for f in flights]
        avg_delay = sum(delays) / len(delays)
        if avg_delay > 30:
            score += 15
        elif avg_delay > 15:
            score += 8

    return int(clamp(score))


def parking_pressure_score(parking: Optional[Sequence[Any]]) -> int:
    """
    Mean occupancy across lots, scaled to 0-100.

    Lots without capacity data are skipped; with no usable lot the
    score defaults to 50.
    """
    rates = []
    for lot in parking or []:
        available = record_value(lot, 'available_spaces', 'availableSpaces')
        total = record_value(lot, 'total_spaces', 'totalSpaces')
        if available is None or not total:
            continue
        rates.append(1 - available / total)

    if not rates:
        return DEFAULT_PARKING_SCORE

    return clamp_score(sum(rates) / len(rates) * 100)


def _mentions(text: str, keywords: Sequence[str]) -> bool:
    return any(k in text for k in keywords)


def traffic_score(traffic: Optional[Sequence[Any]]) -> int:
    """
    Score road conditions from incident text.

    30 base, +25 per record mentioning construction, +15 per record
    mentioning a delay or slow traffic, capped at 100. Defaults to 30.
    """
    if not traffic:
        return DEFAULT_TRAFFIC_SCORE

    descriptions = [(record_value(t, 'description') or '').lower() for t in traffic]
    construction = sum(1 for d in descriptions if _mentions(d, CONSTRUCTION_KEYWORDS))
    delays = sum(1 for d in descriptions if _mentions(d, DELAY_KEYWORDS))

    return int(min(100, DEFAULT_TRAFFIC_SCORE + construction * 25 + delays * 15))


def estimate_flight_count(hour: int, rng: random.Random, jitter: int = 5) -> int:
    """Base operations for the hour plus integer jitter in [-jitter, jitter)."""
    return max(0, base_flights_for_hour(hour) + rng.randrange(-jitter, jitter))


def format_hour(hour: int) -> str:
    """12-hour clock label, e.g. 0 -> '12 AM', 17 -> '5 PM'."""
    suffix = 'AM' if hour < 12 else 'PM'
    return f'{hour % 12 or 12} {suffix}'


def derive_travel_recommendation(
    forecast: Sequence[CongestionForecastEntry],
    count: int = 3,
) -> TravelRecommendation:
    """
    Pick the quietest and busiest hours of a forecast.

    The forecast is sorted by bar_height ascending; the first `count`
    entries are the best hours, the last `count` (busiest first) the ones
    to avoid. Flight counts are summed for context.
    """
    if not forecast:
        return TravelRecommendation(
            best_hours=[],
            avoid_hours=[],
            best_flight_count=0,
            avoid_flight_count=0,
            message='No forecast available yet.',
        )

    ordered = sorted(forecast, key=lambda e: e.bar_height)
    best = ordered[:count]
    avoid = list(reversed(ordered[-count:]))

    best_labels = ', '.join(format_hour(e.hour) for e in best)
    avoid_labels = ', '.join(format_hour(e.hour) for e in avoid)
    best_flights = sum(e.flight_count for e in best)
    avoid_flights = sum(e.flight_count for e in avoid)

    return TravelRecommendation(
        best_hours=best,
        avoid_hours=avoid,
        best_flight_count=best_flights,
        avoid_flight_count=avoid_flights,
        message=(
            f'Best times to travel: {best_labels} (~{best_flights} flights). '
            f'Avoid {avoid_labels} when congestion peaks (~{avoid_flights} flights).'
        ),
    )


# -----------------------------------------------------------------------------
# Forecast pipeline
# -----------------------------------------------------------------------------

@dataclass
class ForecastRun:
    """Everything one forecast run produced."""
    entries: List[CongestionForecastEntry]
    mode: ForecastMode
    signals: Optional[SignalSnapshot]
    generated_at: datetime
    error: Optional[str] = None


class CongestionForecaster:
    """
    Produces the rolling congestion forecast.

    Signal sources are any objects with an `async fetch()` returning a
    list of records. All randomness (flight-count jitter, fallback bar
    heights) goes through `rng`.
    """

    def __init__(
        self,
        flight_source=None,
        parking_source=None,
        traffic_source=None,
        rng: Optional[random.Random] = None,
        settings: Optional[ForecastConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.flight_source = flight_source
        self.parking_source = parking_source
        self.traffic_source = traffic_source
        self.rng = rng or random.Random()
        self.settings = settings or config.forecast
        self.clock = clock or datetime.now

        self.last_mode: Optional[ForecastMode] = None

    async def fetch_signals(self) -> SignalSnapshot:
        """
        Fetch all three signals concurrently and wait for every one.

        Raises the first source error after all fetches have settled.
        A source that is not configured contributes an empty list.
        """
        names = ('flights', 'parking', 'traffic')
        sources = (self.flight_source, self.parking_source, self.traffic_source)

        results = await asyncio.gather(
            *(self._fetch(source) for source in sources),
            return_exceptions=True,
        )

        errors = [(name, r) for name, r in zip(names, results) if isinstance(r, BaseException)]
        for name, error in errors:
            logger.error(f'{name} signal source failed: {error}')
        if errors:
            raise errors[0][1]

        flights, parking, traffic = results
        return SignalSnapshot(
            flights=list(flights or []),
            parking=list(parking or []),
            traffic=list(traffic or []),
            fetched_at=self.clock(),
        )

    @staticmethod
    async def _fetch(source) -> list:
        if source is None:
            return []
        return await source.fetch()

    async def run_forecast(self) -> ForecastRun:
        """
        Fetch signals and build the forecast, falling back on any source error.

        Never raises.
        """
        try:
            signals = await self.fetch_signals()
        except Exception as e:
            logger.error(f'Live signals unavailable, using fallback forecast: {e}')
            entries = self.build_forecast(ForecastMode.FALLBACK)
            return ForecastRun(
                entries=entries,
                mode=ForecastMode.FALLBACK,
                signals=None,
                generated_at=self.clock(),
                error=str(e),
            )

        entries = self.build_forecast(ForecastMode.LIVE, signals)
        return ForecastRun(
            entries=entries,
            mode=ForecastMode.LIVE,
            signals=signals,
            generated_at=self.clock(),
        )

    async def generate_congestion_forecast(self) -> List[CongestionForecastEntry]:
        """Forecast for the next `horizon_hours` hours, starting at the current hour."""
        run = await self.run_forecast()
        return run.entries

    def build_forecast(
        self,
        mode: ForecastMode,
        signals: Optional[SignalSnapshot] = None,
        now: Optional[datetime] = None,
    ) -> List[CongestionForecastEntry]:
        """
        Single generation pipeline for both modes.

        LIVE scores each hour from the signals (missing signals score at
        their defaults); FALLBACK draws bar heights from the time-of-day
        ranges. Hours wrap at midnight and carry their own calendar date.
        """
        s = self.settings
        start = (now or self.clock()).replace(minute=0, second=0, microsecond=0)

        if mode == ForecastMode.LIVE:
            flights = signals.flights if signals else []
            parking_score = parking_pressure_score(signals.parking if signals else [])
            road_score = traffic_score(signals.traffic if signals else [])

        entries = []
        for offset in range(s.horizon_hours):
            slot = start + timedelta(hours=offset)
            hour = slot.hour

            if mode == ForecastMode.LIVE:
                bar_height = self._live_score(hour, flights, parking_score, road_score)
            else:
                bar_height = self._fallback_score(hour)

            level = band_for_score(bar_height, s.high_threshold, s.medium_threshold)
            entries.append(CongestionForecastEntry(
                hour=hour,
                date=slot.date().isoformat(),
                congestion_level=level,
                bar_height=bar_height,
                flight_count=estimate_flight_count(hour, self.rng, s.flight_count_jitter),
            ))
            logger.debug(f'Forecast {slot:%Y-%m-%d %H}:00 -> {bar_height} ({level.value})')

        self.last_mode = mode
        logger.info(f'Generated {len(entries)}-hour congestion forecast ({mode.value})')
        return entries

    def _live_score(self, hour: int, flights: Sequence[Any], parking_score: int, road_score: int) -> int:
        s = self.settings
        return clamp_score(
            flight_traffic_score(hour, flights) * s.flight_weight
            + parking_score * s.parking_weight
            + road_score * s.traffic_weight
        )

    def _fallback_score(self, hour: int) -> int:
        low, high = fallback_range(hour)
        return self.rng.randrange(low, high)
