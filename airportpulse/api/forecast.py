"""
Forecast API endpoints.

Provides endpoints for:
- GET /api/forecast - Latest 12-hour congestion forecast and recommendation
- POST /api/refresh - Run a refresh cycle now
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify, current_app

from airportpulse.cache import dashboard_cache
from airportpulse.ingestion import summarize_departures

logger = logging.getLogger(__name__)

forecast_bp = Blueprint('forecast', __name__, url_prefix='/api')


def _cache():
    return current_app.config.get('DASHBOARD_CACHE') or dashboard_cache


def _forecast_payload(cache) -> dict:
    payload = cache.snapshot()
    signals = payload['signals']
    payload['flightMetrics'] = summarize_departures(signals['flights']) if signals else None
    return payload


@forecast_bp.route('/forecast', methods=['GET'])
def get_forecast():
    """
    Get the latest congestion forecast.

    Runs a refresh first if nothing has been published yet.

    Returns:
    - forecast: one entry per hour (hour, date, congestionLevel,
      congestionColor, barHeight, flightCount)
    - mode: 'live' or 'fallback'
    - recommendation: best and avoid hours
    - signals: the live signals the forecast was built from
    """
    start_time = time.perf_counter()
    cache = _cache()

    if cache.get_forecast() is None:
        pipeline = current_app.config.get('REFRESH_PIPELINE')
        if pipeline is None or pipeline.refresh() is None:
            return jsonify({'error': 'Forecast not ready yet'}), 503

    payload = _forecast_payload(cache)
    payload['query_time_ms'] = round((time.perf_counter() - start_time) * 1000, 2)
    return jsonify(payload)


@forecast_bp.route('/refresh', methods=['POST'])
def refresh_forecast():
    """
    Run a refresh cycle on demand.

    Returns 409 when a refresh is already in progress.
    """
    pipeline = current_app.config.get('REFRESH_PIPELINE')
    if pipeline is None:
        return jsonify({'error': 'Refresh pipeline not configured'}), 503

    start_time = time.perf_counter()
    run = pipeline.refresh()
    if run is None:
        return jsonify({'error': 'Refresh already in progress'}), 409

    payload = _forecast_payload(_cache())
    payload['refreshedAt'] = datetime.now(timezone.utc).isoformat()
    payload['query_time_ms'] = round((time.perf_counter() - start_time) * 1000, 2)
    return jsonify(payload)
