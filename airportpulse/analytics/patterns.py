"""
Calibration tables for DFW airport activity.

These are hand-tuned estimates of typical operations, not values fitted
to data. They live in one place so they can be swapped out for tables
computed from a real historical store.
"""

from datetime import date
from typing import Dict, FrozenSet, List, Tuple

# Departures + arrivals per hour on an ordinary weekday. Bimodal, with a
# morning bank around 07-08 and the evening bank around 17-18.
HOURLY_BASE_FLIGHTS: Dict[int, int] = {
    0: 8, 1: 5, 2: 3, 3: 2, 4: 4, 5: 12,
    6: 28, 7: 45, 8: 52, 9: 38, 10: 42, 11: 46,
    12: 48, 13: 44, 14: 46, 15: 49, 16: 52, 17: 58,
    18: 55, 19: 48, 20: 42, 21: 35, 22: 22, 23: 15,
}
DEFAULT_BASE_FLIGHTS = 30

# (label, (start month, start day), (end month, end day)), inclusive and
# within one calendar year. Hand-picked calibration dates; the Thanksgiving
# window is fixed to Nov 20-30 rather than computed from the holiday.
PEAK_TRAVEL_WINDOWS: List[Tuple[str, Tuple[int, int], Tuple[int, int]]] = [
    ('thanksgiving', (11, 20), (11, 30)),
    ('year_end_holidays', (12, 20), (12, 31)),
    ('new_year', (1, 1), (1, 3)),
    ('summer', (6, 25), (8, 15)),
]

# Flight-traffic base score by time of day, checked in order.
FLIGHT_TRAFFIC_BANDS: List[Tuple[FrozenSet[int], int]] = [
    (frozenset(range(6, 10)), 85),  # morning peak
    (frozenset(range(16, 21)), 90),  # evening peak
    (frozenset(range(10, 16)), 55),  # midday
    (frozenset({22, 23, 0, 1, 2, 3, 4, 5}), 20),  # late night
]
DEFAULT_FLIGHT_TRAFFIC_SCORE = 40

# Time-of-day rule for the fallback forecast: peak hours and the half-open
# [low, high) range their bar height is drawn from. Every other hour uses
# DEFAULT_FALLBACK_RANGE. The peak range lies in the high band and the
# default range in the low band.
FALLBACK_BANDS: List[Tuple[FrozenSet[int], Tuple[int, int]]] = [
    (frozenset({6, 7, 8, 17, 18, 19, 20}), (75, 100)),
]
DEFAULT_FALLBACK_RANGE = (15, 40)


def base_flights_for_hour(hour: int) -> int:
    return HOURLY_BASE_FLIGHTS.get(hour, DEFAULT_BASE_FLIGHTS)


def peak_travel_window(day: date) -> str:
    """Return the label of the peak window containing day, or ''."""
    key = (day.month, day.day)
    for label, start, end in PEAK_TRAVEL_WINDOWS:
        if start <= key <= end:
            return label
    return ''


def is_peak_travel_date(day: date) -> bool:
    return bool(peak_travel_window(day))


def flight_traffic_base(hour: int) -> int:
    for hours, score in FLIGHT_TRAFFIC_BANDS:
        if hour in hours:
            return score
    return DEFAULT_FLIGHT_TRAFFIC_SCORE


def fallback_range(hour: int) -> Tuple[int, int]:
    for hours, bar_range in FALLBACK_BANDS:
        if hour in hours:
            return bar_range
    return DEFAULT_FALLBACK_RANGE
