import random
from datetime import date, timedelta

import pytest

from airportpulse.config import HistoryConfig
from airportpulse.models import WeatherCondition, sunday_based_weekday
from airportpulse.analytics import HistoricalDataGenerator, HistoricalTrendStore, create_historical_store
from airportpulse.analytics.patterns import is_peak_travel_date, peak_travel_window

from helpers import NOW, ScriptedRandom, make_point

WEDNESDAY = date(2024, 3, 13)
MONDAY = date(2024, 3, 11)
FRIDAY = date(2024, 3, 15)
SATURDAY = date(2024, 3, 16)
SUNDAY = date(2024, 3, 17)
SUMMER_WEDNESDAY = date(2024, 7, 3)


@pytest.fixture
def flat_generator(clock):
    """No weather events, no jitter."""
    return HistoricalDataGenerator(rng=ScriptedRandom(value=0.5, uniform_value=1.0), clock=clock)


def test_sunday_based_weekday():
    assert sunday_based_weekday(SUNDAY) == 0
    assert sunday_based_weekday(MONDAY) == 1
    assert sunday_based_weekday(WEDNESDAY) == 3
    assert sunday_based_weekday(SATURDAY) == 6


def test_peak_travel_windows():
    assert peak_travel_window(date(2024, 11, 25)) == 'thanksgiving'
    assert peak_travel_window(date(2024, 12, 31)) == 'year_end_holidays'
    assert peak_travel_window(date(2025, 1, 3)) == 'new_year'
    assert peak_travel_window(date(2024, 6, 25)) == 'summer'
    assert peak_travel_window(date(2024, 8, 15)) == 'summer'
    assert not is_peak_travel_date(date(2024, 8, 16))
    assert not is_peak_travel_date(date(2025, 1, 4))
    assert not is_peak_travel_date(WEDNESDAY)


def test_thanksgiving_window_is_fixed_calendar_range():
    for year in (2023, 2024, 2025):
        assert peak_travel_window(date(year, 11, 20)) == 'thanksgiving'
        assert peak_travel_window(date(year, 11, 30)) == 'thanksgiving'
        assert not is_peak_travel_date(date(year, 11, 19))
    assert peak_travel_window(date(2024, 12, 1)) == ''


def test_generate_covers_previous_days(clock, rng):
    generator = HistoricalDataGenerator(rng=rng, clock=clock)
    points = generator.generate(3)

    assert len(points) == 72
    assert points[0].date == NOW.date() - timedelta(days=3)
    assert points[-1].date == NOW.date() - timedelta(days=1)
    assert [p.hour for p in points[:24]] == list(range(24))


def test_ordinary_weekday_uses_base_table(flat_generator):
    point = flat_generator.generate_point(WEDNESDAY, 17)

    assert point.flight_count == 58
    assert point.congestion_score == 89  # 58 / 65 * 100
    assert point.avg_delay_minutes == 15
    assert point.parking_occupancy == 86  # 40 + 44.5 + 1.0, half up
    assert point.weather_condition == WeatherCondition.CLEAR
    assert point.special_event is False


@pytest.mark.parametrize('day,expected', [
    (WEDNESDAY, 42),
    (MONDAY, 45),  # 42 * 1.08
    (FRIDAY, 48),  # 42 * 1.15
    (SATURDAY, 48),
    (SUNDAY, 48),
])
def test_day_of_week_multipliers(flat_generator, day, expected):
    assert flat_generator.generate_point(day, 10).flight_count == expected


def test_peak_travel_flags_special_event(flat_generator):
    point = flat_generator.generate_point(SUMMER_WEDNESDAY, 10)

    assert point.special_event is True
    assert point.flight_count == 53  # 42 * 1.25 = 52.5, rounded half up


def test_weather_event_cuts_traffic(clock):
    generator = HistoricalDataGenerator(rng=ScriptedRandom(value=0.05, uniform_value=1.0), clock=clock)
    point = generator.generate_point(WEDNESDAY, 10)

    assert point.weather_condition == WeatherCondition.RAIN
    assert point.flight_count == 29  # 42 * 0.7


def test_fog_when_draw_above_rain_share(clock):
    class Draws(ScriptedRandom):
        def __init__(self):
            super().__init__(uniform_value=1.0)
            self.draws = iter([0.05, 0.9])

        def random(self):
            return next(self.draws)

    generator = HistoricalDataGenerator(rng=Draws(), clock=clock)
    assert generator.generate_point(WEDNESDAY, 10).weather_condition == WeatherCondition.FOG


def test_generated_series_stays_in_bounds(clock, rng):
    points = HistoricalDataGenerator(rng=rng, clock=clock).generate(90)

    assert len(points) == 90 * 24
    for p in points:
        assert 0 <= p.congestion_score <= 100
        assert 0 <= p.parking_occupancy <= 100
        assert p.flight_count >= 0
        assert p.day_of_week == sunday_based_weekday(p.date)
        if p.congestion_score > 70:
            assert 15 <= p.avg_delay_minutes < 35
        elif p.congestion_score > 40:
            assert 5 <= p.avg_delay_minutes < 20
        else:
            assert 0 <= p.avg_delay_minutes < 8


def test_seeded_generation_is_reproducible(clock):
    first = HistoricalDataGenerator(rng=random.Random(7), clock=clock).generate(5)
    second = HistoricalDataGenerator(rng=random.Random(7), clock=clock).generate(5)
    assert first == second


def test_create_historical_store_uses_window(clock, rng):
    store = create_historical_store(rng=rng, clock=clock, settings=HistoryConfig(window_days=2))

    assert len(store) == 48
    assert store.window_days == 2


def test_add_point_stamps_today(empty_store):
    point = empty_store.add_historical_data_point(
        hour=17,
        flight_count=60,
        avg_delay_minutes=25,
        congestion_score=92,
        parking_occupancy=80,
        weather_condition='rain',
    )

    assert point.date == NOW.date()
    assert point.day_of_week == 3
    assert point.weather_condition == WeatherCondition.RAIN
    assert empty_store.all() == [point]


def test_add_point_clamps_scores(empty_store):
    point = empty_store.add_historical_data_point(
        hour=0,
        flight_count=-4,
        avg_delay_minutes=-1,
        congestion_score=150,
        parking_occupancy=-20,
    )

    assert point.flight_count == 0
    assert point.avg_delay_minutes == 0
    assert point.congestion_score == 100
    assert point.parking_occupancy == 0


@pytest.mark.parametrize('hour', [-1, 24])
def test_add_point_rejects_invalid_hour(empty_store, hour):
    with pytest.raises(ValueError):
        empty_store.add_historical_data_point(hour, 10, 0, 10, 10)
    assert len(empty_store) == 0


def test_add_point_rejects_unknown_weather(empty_store):
    with pytest.raises(ValueError):
        empty_store.add_historical_data_point(8, 10, 0, 10, 10, weather_condition='snow')


def test_add_point_prunes_old_history(clock):
    today = NOW.date()
    store = HistoricalTrendStore(
        points=[
            make_point(today - timedelta(days=120), 8, 50),
            make_point(today - timedelta(days=91), 8, 50),
            make_point(today - timedelta(days=90), 8, 50),
            make_point(today - timedelta(days=1), 8, 50),
        ],
        window_days=90,
        clock=clock,
    )

    store.add_historical_data_point(9, 30, 5, 45, 60)

    cutoff = today - timedelta(days=90)
    assert len(store) == 3
    assert all(p.date >= cutoff for p in store.all())


def test_recent_and_matching(store):
    recent = store.recent(7)
    assert len(recent) == 7 * 24
    assert min(p.date for p in recent) == NOW.date() - timedelta(days=7)

    wednesdays_at_eight = store.matching(hour=8, day_of_week=3)
    assert len(wednesdays_at_eight) == 4
    assert all(p.hour == 8 and p.day_of_week == 3 for p in wednesdays_at_eight)

    assert len(store.matching(day_of_week=3)) == 4 * 24


def test_reads_return_copies(store):
    points = store.all()
    points.clear()
    assert len(store) == 28 * 24


def test_replace_and_clear(store):
    store.replace([make_point(NOW.date(), 1, 10)])
    assert len(store) == 1

    store.clear()
    assert len(store) == 0
