"""
Trend analysis over the historical baseline using NumPy.

Answers "what congestion should we expect at hour H on weekday D" by
blending four views of the history:

1. Historical pattern: mean congestion of the exact (hour, weekday) matches
2. Seasonal factor: the same matches restricted to the last 7 days
3. Day-of-week trend: mean over every hour of that weekday
4. Special-event impact: how much flagged peak-travel points exceed (1)

Confidence comes from the spread of the matches: the tighter the
historical agreement, the higher the confidence.

Every query is read-only and deterministic for a given store and clock.
Missing data degrades to documented defaults; nothing here raises.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import numpy as np

from airportpulse.config import config, TrendConfig
from airportpulse.models import (
    HistoricalTrendPoint,
    HourlyCongestion,
    TrendAnalysisResult,
    TrendFactors,
    TrendSummary,
)
from airportpulse.analytics.historical_model import HistoricalTrendStore
from airportpulse.analytics.scoring import clamp, clamp_score, round_half_up

logger = logging.getLogger(__name__)

DEFAULT_RECOMMENDATION = 'Moderate congestion expected based on typical patterns.'

DEFAULT_ANALYSIS = TrendAnalysisResult(
    predicted_congestion=50,
    confidence=0.6,
    factors=TrendFactors(
        historical_pattern=50,
        day_of_week_trend=50,
        seasonal_factor=50,
        special_event_impact=0,
    ),
    recommendation=DEFAULT_RECOMMENDATION,
    sample_size=0,
)

EMPTY_SUMMARY = TrendSummary(
    busiest=None,
    quietest=None,
    average_delay=0,
    reliability_score=0,
    sample_size=0,
)


def _congestion(points: List[HistoricalTrendPoint]) -> np.ndarray:
    return np.array([p.congestion_score for p in points], dtype=np.float64)


def confidence_label(confidence: float) -> str:
    if confidence >= 0.8:
        return 'High confidence'
    elif confidence > 0.6:
        return 'Medium confidence'
    return 'Low confidence'


def congestion_message(congestion: float) -> str:
    if congestion < 30:
        return 'Light traffic expected. Great time to travel.'
    elif congestion < 60:
        return 'Moderate congestion expected. Allow extra time.'
    return 'Heavy congestion expected. Consider alternative times.'


def build_recommendation(congestion: float, confidence: float) -> str:
    """Combine a confidence label with the congestion band message."""
    return f'{confidence_label(confidence)}: {congestion_message(congestion)}'


class TrendAnalyzer:
    """
    Computes trend predictions and summary statistics from a store.

    Configuration:
    - settings: blend weights and confidence bounds (default: config.trends)
    - recent_days: window for the seasonal factor (default: 7)
    - clock: returns "now" for the recent-window cutoff
    """

    def __init__(
        self,
        store: HistoricalTrendStore,
        settings: Optional[TrendConfig] = None,
        recent_days: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.settings = settings or config.trends
        self.recent_days = recent_days if recent_days is not None else config.history.recent_days
        self.clock = clock or store.clock

    def analyze_trend_for_hour(self, hour: int, day_of_week: int) -> TrendAnalysisResult:
        """
        Predict congestion for an hour (0-23) on a weekday (0-6, Sunday = 0).

        Returns DEFAULT_ANALYSIS when no historical point matches.
        """
        similar = self.store.matching(hour=hour, day_of_week=day_of_week)
        if not similar:
            logger.debug(f'No history for hour={hour} day={day_of_week}, using default analysis')
            return DEFAULT_ANALYSIS

        scores = _congestion(similar)
        historical_pattern = float(np.mean(scores))
        std_dev = float(np.std(scores))  # population std

        day_scores = _congestion(self.store.matching(day_of_week=day_of_week))
        day_of_week_trend = float(np.mean(day_scores))

        cutoff = self.clock().date() - timedelta(days=self.recent_days)
        recent = [p for p in similar if p.date >= cutoff]
        seasonal_factor = float(np.mean(_congestion(recent))) if recent else historical_pattern

        special = [p for p in similar if p.special_event]
        special_event_impact = (
            float(np.mean(_congestion(special))) - historical_pattern if special else 0.0
        )

        s = self.settings
        predicted = clamp_score(
            historical_pattern * s.historical_weight
            + seasonal_factor * s.recent_weight
            + day_of_week_trend * s.day_of_week_weight
            + special_event_impact * s.special_event_weight
        )

        confidence = float(clamp(
            1 - std_dev / s.confidence_spread,
            s.min_confidence,
            s.max_confidence,
        ))

        return TrendAnalysisResult(
            predicted_congestion=predicted,
            confidence=confidence,
            factors=TrendFactors(
                historical_pattern=round_half_up(historical_pattern),
                day_of_week_trend=round_half_up(day_of_week_trend),
                seasonal_factor=round_half_up(seasonal_factor),
                special_event_impact=round_half_up(special_event_impact),
            ),
            recommendation=build_recommendation(predicted, confidence),
            sample_size=len(similar),
        )

    def get_weekly_pattern(self, hour: int) -> List[TrendAnalysisResult]:
        """Analysis for `hour` on each weekday, Sunday first."""
        return [self.analyze_trend_for_hour(hour, day) for day in range(7)]

    def hourly_averages(self, points: Optional[List[HistoricalTrendPoint]] = None) -> List[HourlyCongestion]:
        """Mean congestion per hour of day, ignoring date and weekday."""
        points = self.store.all() if points is None else points
        if not points:
            return []

        hours = np.array([p.hour for p in points], dtype=np.int64)
        scores = _congestion(points)

        result = []
        for hour in range(24):
            mask = hours == hour
            if mask.any():
                result.append(HourlyCongestion(
                    hour=hour,
                    avg_congestion=round_half_up(float(np.mean(scores[mask]))),
                ))
        return result

    def get_trend_summary(self) -> TrendSummary:
        """
        Roll the whole series up for the dashboard.

        - busiest/quietest: hour with max/min mean congestion (earliest hour on ties)
        - average_delay: mean avg_delay_minutes across all points
        - reliability_score: 100 - stddev(congestion)/2, clamped to 0-100
        """
        points = self.store.all()
        if not points:
            return EMPTY_SUMMARY

        hourly = self.hourly_averages(points)
        busiest = max(hourly, key=lambda h: h.avg_congestion)
        quietest = min(hourly, key=lambda h: h.avg_congestion)

        delays = np.array([p.avg_delay_minutes for p in points], dtype=np.float64)
        scores = _congestion(points)
        reliability = clamp(100 - float(np.sqrt(np.var(scores))) / 2, 0, 100)

        return TrendSummary(
            busiest=busiest,
            quietest=quietest,
            average_delay=round_half_up(float(np.mean(delays))),
            reliability_score=round_half_up(reliability),
            sample_size=len(points),
            hourly=hourly,
        )
