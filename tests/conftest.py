import random
from datetime import timedelta

import pytest

from airportpulse.models import FlightDeparture
from airportpulse.analytics import CongestionForecaster, HistoricalTrendStore, TrendAnalyzer
from airportpulse.cache import DashboardCache

from helpers import NOW, FailingSource, ScriptedRandom, StaticSource, make_point


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def scripted_rng():
    return ScriptedRandom()


@pytest.fixture
def empty_store(clock):
    return HistoricalTrendStore(points=[], window_days=90, clock=clock)


@pytest.fixture
def store(clock):
    """Four weeks of history: every hour of every day, congestion = hour * 4."""
    today = NOW.date()
    points = [
        make_point(today - timedelta(days=offset), hour, hour * 4)
        for offset in range(1, 29)
        for hour in range(24)
    ]
    return HistoricalTrendStore(points=points, window_days=90, clock=clock)


@pytest.fixture
def analyzer(store, clock):
    return TrendAnalyzer(store, clock=clock)


@pytest.fixture
def live_forecaster(clock):
    return CongestionForecaster(
        flight_source=StaticSource([FlightDeparture('AA 1423', 'LAX', '10:45 AM', 'On Time', 'success')]),
        parking_source=StaticSource([{'availableSpaces': 50, 'totalSpaces': 100}]),
        traffic_source=StaticSource([{'description': 'Free Flow'}]),
        rng=ScriptedRandom(),
        clock=clock,
    )


@pytest.fixture
def failing_forecaster(clock):
    return CongestionForecaster(
        flight_source=FailingSource('flights down'),
        parking_source=FailingSource('parking down'),
        traffic_source=FailingSource('traffic down'),
        rng=ScriptedRandom(),
        clock=clock,
    )


@pytest.fixture
def cache():
    return DashboardCache()


@pytest.fixture
def app(store, live_forecaster, cache, clock):
    from airportpulse.app import create_app

    app = create_app(
        start_refresh=False,
        store=store,
        forecaster=live_forecaster,
        cache=cache,
        rng=ScriptedRandom(),
        clock=clock,
    )
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
