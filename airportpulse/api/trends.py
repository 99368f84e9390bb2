"""
Historical trend API endpoints.

Provides endpoints for:
- GET /api/trends - Recent historical observations
- POST /api/trends - Record a new observation
- GET /api/trends/analysis - Prediction for an hour and weekday
- GET /api/trends/weekly - Prediction for an hour on every weekday
- GET /api/trends/summary - Busiest/quietest hours, delay, reliability

Weekdays are numbered Sunday = 0 through Saturday = 6.
"""

import logging
import time
from typing import Optional

from flask import Blueprint, jsonify, request, current_app

from airportpulse.models import record_value, sunday_based_weekday

logger = logging.getLogger(__name__)

trends_bp = Blueprint('trends', __name__, url_prefix='/api/trends')

MAX_TREND_DAYS = 90
DEFAULT_TREND_DAYS = 30


def _analyzer():
    return current_app.config['TREND_ANALYZER']


def _store():
    return current_app.config['HISTORY_STORE']


def _bounded_int(value, name: str, low: int, high: int) -> int:
    """
    Parse an integer parameter within [low, high].

    Raises:
        ValueError: missing, non-integer or out-of-range value
    """
    if value is None or value == '':
        raise ValueError(f'{name} is required')
    if isinstance(value, bool):
        raise ValueError(f'{name} must be an integer')
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValueError(f'{name} must be an integer')
    if isinstance(value, float) and value != parsed:
        raise ValueError(f'{name} must be an integer')
    if not low <= parsed <= high:
        raise ValueError(f'{name} must be between {low} and {high}')
    return parsed


def _query_int(name: str, default: int, low: int, high: int) -> int:
    value: Optional[str] = request.args.get(name)
    if value is None:
        return default
    return _bounded_int(value, name, low, high)


@trends_bp.errorhandler(ValueError)
def invalid_input(e):
    return jsonify({'error': str(e)}), 400


@trends_bp.route('', methods=['GET'])
def list_trends():
    """
    Get historical observations from the last N days.

    Query params:
    - days: 1-90 (default 30)
    """
    start_time = time.perf_counter()

    days = _query_int('days', DEFAULT_TREND_DAYS, 1, MAX_TREND_DAYS)
    points = _store().recent(days)

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'trends': [p.to_dict() for p in points],
        'count': len(points),
        'days': days,
        'query_time_ms': round(query_time_ms, 2),
    })


@trends_bp.route('', methods=['POST'])
def add_trend():
    """
    Record an observation for the current date.

    Body (camelCase or snake_case keys):
        {"hour": 17, "flightCount": 58, "avgDelayMinutes": 22,
         "congestionScore": 88, "parkingOccupancy": 74,
         "weatherCondition": "rain", "specialEvent": false}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON body required'}), 400

    point = _store().add_historical_data_point(
        hour=_bounded_int(record_value(data, 'hour'), 'hour', 0, 23),
        flight_count=_bounded_int(
            record_value(data, 'flightCount', 'flight_count'), 'flightCount', 0, 1000),
        avg_delay_minutes=_bounded_int(
            record_value(data, 'avgDelayMinutes', 'avg_delay_minutes'), 'avgDelayMinutes', 0, 1440),
        congestion_score=_bounded_int(
            record_value(data, 'congestionScore', 'congestion_score'), 'congestionScore', 0, 100),
        parking_occupancy=_bounded_int(
            record_value(data, 'parkingOccupancy', 'parking_occupancy'), 'parkingOccupancy', 0, 100),
        weather_condition=record_value(data, 'weatherCondition', 'weather_condition') or 'clear',
        special_event=bool(record_value(data, 'specialEvent', 'special_event')),
    )

    logger.info(f'Recorded observation for hour {point.hour} (congestion={point.congestion_score})')
    return jsonify({'success': True, 'point': point.to_dict()}), 201


@trends_bp.route('/analysis', methods=['GET'])
def analyze_trend():
    """
    Predict congestion for an hour and weekday.

    Query params:
    - hour: 0-23 (default: current hour)
    - day: 0-6, Sunday = 0 (default: today)
    """
    start_time = time.perf_counter()
    analyzer = _analyzer()

    now = analyzer.clock()
    hour = _query_int('hour', now.hour, 0, 23)
    day = _query_int('day', sunday_based_weekday(now.date()), 0, 6)

    result = analyzer.analyze_trend_for_hour(hour, day)

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'hour': hour,
        'dayOfWeek': day,
        'analysis': result.to_dict(),
        'query_time_ms': round(query_time_ms, 2),
    })


@trends_bp.route('/weekly', methods=['GET'])
def weekly_pattern():
    """
    Predict congestion for one hour on each weekday, Sunday first.

    Query params:
    - hour: 0-23 (default: current hour)
    """
    analyzer = _analyzer()
    hour = _query_int('hour', analyzer.clock().hour, 0, 23)

    week = analyzer.get_weekly_pattern(hour)

    return jsonify({
        'hour': hour,
        'days': [
            {'dayOfWeek': day, **result.to_dict()}
            for day, result in enumerate(week)
        ],
    })


@trends_bp.route('/summary', methods=['GET'])
def trend_summary():
    """Summary statistics over the full historical window."""
    start_time = time.perf_counter()

    summary = _analyzer().get_trend_summary()

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'summary': summary.to_dict(),
        'query_time_ms': round(query_time_ms, 2),
    })
