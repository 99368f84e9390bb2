"""
Analytics module for AirportPulse.

Forecasting and historical-trend analysis:
- Synthetic 90-day historical baseline and its store
- Hour/weekday trend predictions with confidence
- Dashboard trend summary
- Live 12-hour congestion forecast with a time-of-day fallback
"""

from airportpulse.analytics.historical_model import (
    HistoricalDataGenerator,
    HistoricalTrendStore,
    create_historical_store,
)
from airportpulse.analytics.trend_analysis import TrendAnalyzer
from airportpulse.analytics.congestion import (
    CongestionForecaster,
    ForecastRun,
    derive_travel_recommendation,
    flight_traffic_score,
    parking_pressure_score,
    traffic_score,
)

__all__ = [
    'HistoricalDataGenerator',
    'HistoricalTrendStore',
    'create_historical_store',
    'TrendAnalyzer',
    'CongestionForecaster',
    'ForecastRun',
    'derive_travel_recommendation',
    'flight_traffic_score',
    'parking_pressure_score',
    'traffic_score',
]
