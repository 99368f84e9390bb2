"""
Historical trend models - the statistical baseline for predictions.

A HistoricalTrendPoint is one hourly observation (synthetic or learned
from live signals). The Trend Analyzer reads them and produces
TrendAnalysisResult and TrendSummary projections; it never mutates them.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class WeatherCondition(str, Enum):
    """Weather label attached to a historical observation."""
    CLEAR = 'clear'
    RAIN = 'rain'
    FOG = 'fog'


def sunday_based_weekday(day: date) -> int:
    """
    Day of week with Sunday = 0 through Saturday = 6.

    This is the convention used by the dashboard client, so every
    day_of_week value in the API follows it rather than date.weekday().
    """
    return (day.weekday() + 1) % 7


@dataclass
class HistoricalTrendPoint:
    """
    One observation for a specific date and hour.

    congestion_score is derived from flight_count at generation time
    and always lies in [0, 100].
    """
    date: date
    hour: int
    day_of_week: int
    flight_count: int
    avg_delay_minutes: int
    congestion_score: int
    parking_occupancy: int
    weather_condition: WeatherCondition = WeatherCondition.CLEAR
    special_event: bool = False

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'hour': self.hour,
            'dayOfWeek': self.day_of_week,
            'flightCount': self.flight_count,
            'avgDelayMinutes': self.avg_delay_minutes,
            'congestionScore': self.congestion_score,
            'parkingOccupancy': self.parking_occupancy,
            'weatherCondition': self.weather_condition.value,
            'specialEvent': self.special_event,
        }


@dataclass(frozen=True)
class TrendFactors:
    """Derived signals that feed a trend prediction."""
    historical_pattern: int
    day_of_week_trend: int
    seasonal_factor: int
    special_event_impact: int

    def to_dict(self) -> dict:
        return {
            'historicalPattern': self.historical_pattern,
            'dayOfWeekTrend': self.day_of_week_trend,
            'seasonalFactor': self.seasonal_factor,
            'specialEventImpact': self.special_event_impact,
        }


@dataclass(frozen=True)
class TrendAnalysisResult:
    """Expected congestion for one (hour, day-of-week) query."""
    predicted_congestion: int
    confidence: float
    factors: TrendFactors
    recommendation: str
    sample_size: int = 0

    def to_dict(self) -> dict:
        return {
            'predictedCongestion': self.predicted_congestion,
            'confidence': round(self.confidence, 3),
            'factors': self.factors.to_dict(),
            'recommendation': self.recommendation,
            'sampleSize': self.sample_size,
        }


@dataclass(frozen=True)
class HourlyCongestion:
    """Mean congestion for one hour of the day."""
    hour: int
    avg_congestion: int

    def to_dict(self) -> dict:
        return {'hour': self.hour, 'avgCongestion': self.avg_congestion}


@dataclass(frozen=True)
class TrendSummary:
    """
    Dashboard-level rollup of the full historical series.

    busiest and quietest are None when there is no history at all.
    """
    busiest: Optional[HourlyCongestion]
    quietest: Optional[HourlyCongestion]
    average_delay: int
    reliability_score: int
    sample_size: int = 0
    hourly: List[HourlyCongestion] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'busiest': self.busiest.to_dict() if self.busiest else None,
            'quietest': self.quietest.to_dict() if self.quietest else None,
            'averageDelay': self.average_delay,
            'reliabilityScore': self.reliability_score,
            'sampleSize': self.sample_size,
            'hourly': [h.to_dict() for h in self.hourly],
        }
