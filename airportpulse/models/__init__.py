"""
Domain models for AirportPulse.

Plain dataclasses and enums; nothing here touches I/O:
1. history   - historical observations and trend projections
2. forecast  - rolling congestion forecast and travel recommendation
3. signals   - normalized records from the live data sources
"""

from airportpulse.models.history import (
    HistoricalTrendPoint,
    HourlyCongestion,
    TrendAnalysisResult,
    TrendFactors,
    TrendSummary,
    WeatherCondition,
    sunday_based_weekday,
)
from airportpulse.models.forecast import (
    CongestionForecastEntry,
    CongestionLevel,
    ForecastMode,
    TravelRecommendation,
)
from airportpulse.models.signals import (
    FlightDeparture,
    ParkingLot,
    SignalSnapshot,
    TrafficCondition,
    record_value,
)

__all__ = [
    'HistoricalTrendPoint',
    'HourlyCongestion',
    'TrendAnalysisResult',
    'TrendFactors',
    'TrendSummary',
    'WeatherCondition',
    'sunday_based_weekday',
    'CongestionForecastEntry',
    'CongestionLevel',
    'ForecastMode',
    'TravelRecommendation',
    'FlightDeparture',
    'ParkingLot',
    'SignalSnapshot',
    'TrafficCondition',
    'record_value',
]
