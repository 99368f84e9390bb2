"""
Numeric helpers shared by the historical model, trend analyzer and
forecast engine.
"""

import math
from typing import Union

from airportpulse.config import config
from airportpulse.models import CongestionLevel

Number = Union[int, float]


def clamp(value: Number, low: Number = 0, high: Number = 100) -> Number:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves rounded up.

    Python's round() uses banker's rounding, which would turn a
    congestion score of 42.5 into 42.
    """
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Half-up round then clamp into the 0-100 score range."""
    return int(clamp(round_half_up(value), 0, 100))


def congestion_for_flights(flight_count: Number, flight_capacity: float = None) -> int:
    """
    Congestion score of an hourly flight count.

    `flight_capacity` flights (default config.history.flight_capacity)
    score 100. Every stored HistoricalTrendPoint is on this scale.
    """
    if flight_capacity is None:
        flight_capacity = config.history.flight_capacity
    return clamp_score(flight_count / flight_capacity * 100)


def band_for_score(
    score: Number,
    high_threshold: int = None,
    medium_threshold: int = None,
) -> CongestionLevel:
    """
    Map a 0-100 congestion score onto its level.

    >=70 high, >=40 medium, otherwise low (thresholds configurable).
    """
    high_threshold = config.forecast.high_threshold if high_threshold is None else high_threshold
    medium_threshold = config.forecast.medium_threshold if medium_threshold is None else medium_threshold

    if score >= high_threshold:
        return CongestionLevel.HIGH
    elif score >= medium_threshold:
        return CongestionLevel.MEDIUM
    return CongestionLevel.LOW
