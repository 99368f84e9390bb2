"""
AirportPulse Flask Application.

Main entry point for the web application. Initializes:
- Historical baseline and trend analyzer
- Congestion forecaster and its signal sources
- Background refresh pipeline
- API routes

Usage:
    python -m airportpulse.app

Or with gunicorn:
    gunicorn 'airportpulse.app:create_app()'
"""

import logging
import random
from datetime import datetime
from typing import Callable, Optional

from flask import Flask
from flask_cors import CORS

from airportpulse.config import config
from airportpulse.api import forecast_bp, trends_bp, metrics_bp
from airportpulse.cache import DashboardCache, dashboard_cache
from airportpulse.analytics import (
    CongestionForecaster,
    HistoricalTrendStore,
    TrendAnalyzer,
    create_historical_store,
)
from airportpulse.ingestion import (
    FlightSignalSource,
    ParkingSignalSource,
    RefreshPipeline,
    TrafficSignalSource,
)

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    start_refresh: bool = True,
    store: Optional[HistoricalTrendStore] = None,
    forecaster: Optional[CongestionForecaster] = None,
    cache: Optional[DashboardCache] = None,
    rng: Optional[random.Random] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        start_refresh: Whether to start the background refresh loop.
                       Set to False for testing.
        store: Historical store (a fresh 90-day baseline if None)
        forecaster: Congestion forecaster (live signal sources if None)
        cache: Dashboard cache (module singleton if None)
        rng: Random source shared by the generator and the simulations
        clock: Returns "now"; defaults to datetime.now

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    # Register API blueprints
    app.register_blueprint(forecast_bp)
    app.register_blueprint(trends_bp)
    app.register_blueprint(metrics_bp)

    rng = rng or random.Random()

    # Historical baseline
    if store is None:
        logger.info(f'Generating {config.history.window_days}-day historical baseline...')
        store = create_historical_store(rng=rng, clock=clock)
    logger.info(f'Historical store ready with {len(store)} points')

    analyzer = TrendAnalyzer(store, clock=clock)

    # Congestion forecaster with live signal sources
    if forecaster is None:
        forecaster = CongestionForecaster(
            flight_source=FlightSignalSource(rng=rng, clock=clock),
            parking_source=ParkingSignalSource(rng=rng),
            traffic_source=TrafficSignalSource(),
            rng=rng,
            clock=clock,
        )

    cache = cache if cache is not None else dashboard_cache
    pipeline = RefreshPipeline(forecaster, cache=cache, store=store)

    app.config['HISTORY_STORE'] = store
    app.config['TREND_ANALYZER'] = analyzer
    app.config['DASHBOARD_CACHE'] = cache
    app.config['REFRESH_PIPELINE'] = pipeline

    if start_refresh:
        pipeline.start_background()
        logger.info(
            f'Refresh started (warmup={config.refresh.warmup_seconds}s, '
            f'interval={config.refresh.interval_seconds}s)'
        )

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {'error': 'Method not allowed'}, 405

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    logger.info(f'Starting AirportPulse on http://localhost:{config.port}')
    logger.info(f'Forecast: http://localhost:{config.port}/api/forecast')

    app.run(
        host='0.0.0.0',
        port=config.port,
        debug=config.debug,
        use_reloader=False,  # Disable reloader to prevent duplicate refresh threads
    )


if __name__ == '__main__':
    run_development_server()
