"""
API module for AirportPulse.

Provides REST endpoints for:
- The rolling congestion forecast and on-demand refresh
- Historical trend analysis and summaries
- System status
"""

from airportpulse.api.forecast import forecast_bp
from airportpulse.api.trends import trends_bp
from airportpulse.api.metrics import metrics_bp

__all__ = ['forecast_bp', 'trends_bp', 'metrics_bp']
