"""
Configuration management for AirportPulse.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic numbers scattered
throughout the scoring code. The weights and multipliers below are
calibration parameters, hand-tuned rather than derived, and are expected
to be replaced once real historical data is available.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    """Parse a boolean flag such as '1', 'true' or 'yes'."""
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class HistoryConfig:
    """Synthetic historical model settings."""
    window_days: int = int(os.getenv('HISTORY_WINDOW_DAYS', '90'))
    recent_days: int = int(os.getenv('HISTORY_RECENT_DAYS', '7'))
    learning_enabled: bool = _env_bool('HISTORY_LEARNING_ENABLED', 'true')

    # Flights per hour that map to a congestion score of 100
    flight_capacity: float = 65.0

    weekend_multiplier: float = 1.15  # Friday through Sunday
    monday_multiplier: float = 1.08
    peak_travel_multiplier: float = 1.25

    weather_probability: float = 0.1
    weather_impact: float = 0.7
    rain_share: float = 0.6  # Share of weather events labelled rain (rest is fog)

    jitter: float = 0.15


@dataclass(frozen=True)
class TrendConfig:
    """Weights for blending historical factors into a prediction."""
    historical_weight: float = 0.4
    recent_weight: float = 0.3
    day_of_week_weight: float = 0.2
    special_event_weight: float = 0.1

    # Standard deviation at which confidence bottoms out
    confidence_spread: float = 50.0
    min_confidence: float = 0.5
    max_confidence: float = 0.95


@dataclass(frozen=True)
class ForecastConfig:
    """Live congestion forecast settings."""
    horizon_hours: int = int(os.getenv('FORECAST_HORIZON_HOURS', '12'))

    flight_weight: float = 0.5
    parking_weight: float = 0.3
    traffic_weight: float = 0.2

    high_threshold: int = 70
    medium_threshold: int = 40

    flight_count_jitter: int = 5


@dataclass(frozen=True)
class RefreshConfig:
    """Refresh cycle timing."""
    interval_seconds: float = float(os.getenv('REFRESH_INTERVAL_SECONDS', '300'))
    warmup_seconds: float = float(os.getenv('REFRESH_WARMUP_SECONDS', '1'))


@dataclass(frozen=True)
class FlightAwareConfig:
    """FlightAware AeroAPI configuration for live departures."""
    api_key: Optional[str] = os.getenv('FLIGHTAWARE_API_KEY') or None
    base_url: str = 'https://aeroapi.flightaware.com/aeroapi'
    airport_code: str = os.getenv('AIRPORT_ICAO', 'KDFW')
    timeout_seconds: int = 30

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    history: HistoryConfig
    trends: TrendConfig
    forecast: ForecastConfig
    refresh: RefreshConfig
    flightaware: FlightAwareConfig

    # Flask settings
    secret_key: str
    debug: bool
    port: int

    @property
    def summary(self) -> dict:
        """Non-secret settings for the status endpoint."""
        return {
            'history_window_days': self.history.window_days,
            'history_learning_enabled': self.history.learning_enabled,
            'forecast_horizon_hours': self.forecast.horizon_hours,
            'refresh_interval_seconds': self.refresh.interval_seconds,
            'flightaware_configured': self.flightaware.is_configured,
        }


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        history=HistoryConfig(),
        trends=TrendConfig(),
        forecast=ForecastConfig(),
        refresh=RefreshConfig(),
        flightaware=FlightAwareConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
        port=int(os.getenv('PORT', '5000')),
    )


# Singleton instance
config = load_config()
