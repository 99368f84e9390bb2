"""
Congestion forecast models.

A forecast run produces one CongestionForecastEntry per hour of the
horizon. Each run supersedes the previous one entirely.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List


class CongestionLevel(str, Enum):
    """
    Discrete congestion band shown on the dashboard.

    Each level carries the status color the client renders it with.
    """
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'

    @property
    def color(self) -> str:
        return _LEVEL_COLORS[self]


_LEVEL_COLORS = {
    CongestionLevel.LOW: 'success',
    CongestionLevel.MEDIUM: 'warning',
    CongestionLevel.HIGH: 'error',
}


class ForecastMode(str, Enum):
    """Which data the forecast pipeline ran on."""
    LIVE = 'live'
    FALLBACK = 'fallback'


@dataclass(frozen=True)
class CongestionForecastEntry:
    """One hour of the rolling forecast."""
    hour: int
    date: str
    congestion_level: CongestionLevel
    bar_height: int
    flight_count: int

    @property
    def congestion_color(self) -> str:
        return self.congestion_level.color

    def to_dict(self) -> dict:
        return {
            'hour': self.hour,
            'date': self.date,
            'congestionLevel': self.congestion_level.value,
            'congestionColor': self.congestion_color,
            'barHeight': self.bar_height,
            'flightCount': self.flight_count,
        }


@dataclass(frozen=True)
class TravelRecommendation:
    """Best and worst hours of a forecast, for the recommendation banner."""
    best_hours: List[CongestionForecastEntry]
    avoid_hours: List[CongestionForecastEntry]
    best_flight_count: int
    avoid_flight_count: int
    message: str

    def to_dict(self) -> dict:
        return {
            'bestHours': [e.hour for e in self.best_hours],
            'avoidHours': [e.hour for e in self.avoid_hours],
            'bestFlightCount': self.best_flight_count,
            'avoidFlightCount': self.avoid_flight_count,
            'message': self.message,
        }
