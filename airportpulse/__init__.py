"""
AirportPulse Backend Package.

Airport congestion forecasting and historical trend analysis built with
Flask and NumPy.

Modules:
    api/         REST endpoints for the forecast, trends and system status
    models/      Dataclass models (trend points, forecast entries, signals)
    ingestion/   Signal sources and the background refresh pipeline
    analytics/   Historical baseline, NumPy trend analysis, congestion engine
    cache.py     Thread-safe in-memory state of the latest forecast
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
