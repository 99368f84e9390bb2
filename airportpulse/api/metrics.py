"""
System status API endpoint.

Provides endpoints for:
- GET /api/status - Refresh pipeline, cache and history status
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify, current_app

from airportpulse.cache import dashboard_cache
from airportpulse.config import config

logger = logging.getLogger(__name__)

metrics_bp = Blueprint('metrics', __name__, url_prefix='/api')


@metrics_bp.route('/status', methods=['GET'])
def get_system_status():
    """
    Get system health and status information.

    Returns:
    - Refresh pipeline status
    - Cache statistics
    - Historical store size
    - Configuration info
    """
    start_time = time.perf_counter()

    pipeline = current_app.config.get('REFRESH_PIPELINE')
    pipeline_stats = pipeline.stats if pipeline else {'running': False}

    cache = current_app.config.get('DASHBOARD_CACHE') or dashboard_cache
    cache_stats = cache.stats

    store = current_app.config.get('HISTORY_STORE')
    history_points = len(store) if store is not None else 0

    healthy = bool(pipeline_stats.get('running')) and cache_stats['has_forecast']

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'status': 'healthy' if healthy else 'degraded',
        'refresh': pipeline_stats,
        'cache': cache_stats,
        'history': {
            'points': history_points,
            'window_days': store.window_days if store is not None else config.history.window_days,
        },
        'config': config.summary,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round(query_time_ms, 2),
    })
