import asyncio
from datetime import datetime, timezone

import pytest
import requests

from airportpulse.ingestion import (
    FlightAwareClient,
    FlightSignalSource,
    ParkingSignalSource,
    TrafficSignalSource,
    summarize_departures,
)
from airportpulse.ingestion.flightaware_client import departure_status, format_clock, parse_departure

from helpers import ScriptedRandom


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f'{self.status_code} error', response=self)

    def json(self):
        return self.payload


class FakeClient:
    """Configured client double for FlightSignalSource."""

    def __init__(self, departures=None, error=None):
        self.departures = departures or []
        self.error = error

    @property
    def is_configured(self):
        return True

    def get_departures(self):
        if self.error:
            raise self.error
        return self.departures


@pytest.fixture
def unconfigured_client():
    return FlightAwareClient(api_key=None)


# -----------------------------------------------------------------------------
# FlightAware client
# -----------------------------------------------------------------------------

def test_format_clock():
    assert format_clock(datetime(2024, 3, 13, 0, 5)) == '12:05 AM'
    assert format_clock(datetime(2024, 3, 13, 19, 45)) == '7:45 PM'


@pytest.mark.parametrize('delay,cancelled,diverted,expected', [
    (0, False, False, ('On Time', 'success')),
    (15, False, False, ('Delayed 15m', 'warning')),
    (30, False, False, ('Delayed 30m', 'warning')),
    (45, False, False, ('Delayed 45m', 'error')),
    (0, True, False, ('Cancelled', 'error')),
    (0, False, True, ('Diverted', 'error')),
])
def test_departure_status(delay, cancelled, diverted, expected):
    assert departure_status(delay, cancelled, diverted) == expected


def test_parse_departure_measures_delay():
    departure = parse_departure({
        'ident': 'AAL1423',
        'ident_iata': 'AA1423',
        'destination': {'code': 'KLAX'},
        'scheduled_out': '2024-03-13T15:00:00Z',
        'estimated_out': '2024-03-13T15:20:00Z',
        'gate_origin': 'A12',
        'terminal_origin': 'A',
    })

    assert departure.flight_number == 'AA1423'
    assert departure.destination == 'KLAX'
    assert departure.delay_minutes == 20
    assert departure.status == 'Delayed 20m'
    assert departure.status_color == 'warning'
    assert departure.gate == 'A12'


def test_parse_departure_defaults():
    departure = parse_departure({'scheduled_out': '2024-03-13T15:00:00Z', 'cancelled': True})

    assert departure.flight_number == 'Unknown'
    assert departure.delay_minutes == 0
    assert departure.status == 'Cancelled'
    assert departure.gate == 'TBD'


def test_parse_departure_requires_schedule():
    assert parse_departure({'ident': 'UAL892'}) is None
    assert parse_departure({'scheduled_out': 'not a time'}) is None


def test_client_filters_upcoming_departures(monkeypatch):
    client = FlightAwareClient(api_key='test-key')
    payload = {'departures': [
        {'ident': 'LATE', 'scheduled_out': '2024-03-13T18:30:00Z'},
        {'ident': 'SECOND', 'scheduled_out': '2024-03-13T16:00:00Z'},
        {'ident': 'GONE', 'scheduled_out': '2024-03-13T14:00:00Z'},
        {'ident': 'FIRST', 'scheduled_out': '2024-03-13T15:30:00Z'},
    ]}
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append(url)
        return FakeResponse(payload)

    monkeypatch.setattr(client.session, 'get', fake_get)

    now = datetime(2024, 3, 13, 15, 0, tzinfo=timezone.utc)
    departures = client.get_departures(window_hours=3, now=now)

    assert [d.flight_number for d in departures] == ['FIRST', 'SECOND']
    assert calls == ['https://aeroapi.flightaware.com/aeroapi/airports/KDFW/flights/departures']
    assert client.session.headers['x-apikey'] == 'test-key'


def test_client_reraises_http_errors(monkeypatch):
    client = FlightAwareClient(api_key='test-key')
    monkeypatch.setattr(client.session, 'get', lambda *a, **kw: FakeResponse({}, status_code=429))

    with pytest.raises(requests.exceptions.HTTPError):
        client.get_departures()


# -----------------------------------------------------------------------------
# Signal sources
# -----------------------------------------------------------------------------

def test_flight_source_simulates_without_api_key(unconfigured_client, clock):
    source = FlightSignalSource(client=unconfigured_client, rng=ScriptedRandom(), clock=clock)
    departures = asyncio.run(source.fetch())

    assert len(departures) == 8
    assert departures[0].flight_number == 'AA 1423'
    assert departures[0].departure_time == '10:45 AM'
    assert departures[0].gate == 'A1'
    assert departures[0].terminal == 'Terminal A'
    assert departures[1].departure_time == '11:00 AM'
    assert departures[2].status == 'Delayed 45m'
    assert departures[2].status_color == 'error'
    assert departures[5].terminal == 'Terminal A'


def test_flight_source_falls_back_on_request_error(clock):
    client = FakeClient(error=requests.exceptions.ConnectionError('no route'))
    source = FlightSignalSource(client=client, rng=ScriptedRandom(), clock=clock)

    assert len(source.get_departures()) == 8


def test_flight_source_falls_back_on_empty_board(clock):
    source = FlightSignalSource(client=FakeClient(departures=[]), rng=ScriptedRandom(), clock=clock)
    assert len(source.get_departures()) == 8


def test_flight_source_propagates_unexpected_errors(clock):
    source = FlightSignalSource(client=FakeClient(error=KeyError('departures')), clock=clock)

    with pytest.raises(KeyError):
        asyncio.run(source.fetch())


def test_flight_source_prefers_live_departures(clock):
    live = parse_departure({'ident': 'AAL1', 'scheduled_out': '2024-03-13T15:00:00Z'})
    source = FlightSignalSource(client=FakeClient(departures=[live]), clock=clock)

    assert source.get_departures() == [live]


def test_parking_source_draws_by_category():
    lots = asyncio.run(ParkingSignalSource(rng=ScriptedRandom(0.5)).fetch())

    assert len(lots) == 8
    terminal_a = lots[0]
    assert terminal_a.status == 'Limited'
    assert terminal_a.status_color == 'warning'
    assert terminal_a.available_spaces == 1
    assert terminal_a.total_spaces == 85

    express_north = lots[5]
    assert express_north.status == 'Available'
    assert express_north.available_spaces == 45  # 10% of 450 plus a zero draw
    assert express_north.shuttle_required is True


def test_parking_source_full_lots():
    lots = ParkingSignalSource(rng=ScriptedRandom(0.05)).get_availability()

    assert all(lot.status == 'Full' for lot in lots)
    assert all(lot.available_spaces == 0 for lot in lots)


def test_traffic_source_returns_fresh_copies():
    source = TrafficSignalSource()
    first = asyncio.run(source.fetch())
    first[0].incidents.append('changed')

    second = source.get_conditions()
    assert len(second) == 5
    assert 'changed' not in second[0].incidents
    assert second[2].description == 'Free Flow'


def test_summarize_departures(unconfigured_client, clock):
    departures = FlightSignalSource(client=unconfigured_client, rng=ScriptedRandom(), clock=clock).get_departures()

    metrics = summarize_departures(departures)

    assert metrics['onTimePercentage'] == 50  # 4 of 8
    assert metrics['averageDelay'] == 12  # 95 / 8 = 11.875
    assert metrics['cancellations'] == 0
    assert summarize_departures([d.to_dict() for d in departures]) == metrics


def test_summarize_empty_board():
    assert summarize_departures([]) == {'onTimePercentage': 85, 'averageDelay': 12, 'cancellations': 2}
