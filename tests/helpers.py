"""Shared test doubles and builders for the test modules and fixtures."""

from datetime import date, datetime

from airportpulse.models import HistoricalTrendPoint, WeatherCondition, sunday_based_weekday

# Wednesday, outside every peak travel window
NOW = datetime(2024, 3, 13, 10, 30)


class ScriptedRandom:
    """
    Deterministic stand-in for random.Random.

    random() and uniform() return fixed values; randrange()/randint()
    return the lowest value of their range.
    """

    def __init__(self, value: float = 0.5, uniform_value=None):
        self.value = value
        self.uniform_value = uniform_value

    def random(self):
        return self.value

    def uniform(self, a, b):
        if self.uniform_value is not None:
            return self.uniform_value
        return (a + b) / 2

    def randrange(self, start, stop=None, step=1):
        if stop is None:
            return 0
        return start

    def randint(self, a, b):
        return a


class StaticSource:
    """Signal source returning a fixed list."""

    def __init__(self, records):
        self.records = records
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        return list(self.records)


class FailingSource:
    """Signal source whose fetch always raises."""

    def __init__(self, message='source down'):
        self.message = message
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        raise ConnectionError(self.message)


def make_point(day: date, hour: int, congestion: int, delay: int = 10, special_event: bool = False):
    return HistoricalTrendPoint(
        date=day,
        hour=hour,
        day_of_week=sunday_based_weekday(day),
        flight_count=congestion // 2,
        avg_delay_minutes=delay,
        congestion_score=congestion,
        parking_occupancy=60,
        weather_condition=WeatherCondition.CLEAR,
        special_event=special_event,
    )
