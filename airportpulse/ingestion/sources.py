"""
Signal sources consumed by the congestion forecast engine.

Each source exposes `async fetch()` returning a list of normalized
records. Blocking HTTP work runs in a worker thread so that all sources
of a refresh cycle can be awaited together.

- FlightSignalSource: FlightAware departures, simulated board as fallback
- ParkingSignalSource: simulated DFW lot availability
- TrafficSignalSource: DFW route conditions with incident text

Degradation inside a source (no API key, HTTP failure, empty board) is
handled here by serving simulated data. Anything else propagates, and
the forecast engine switches to its fallback mode.
"""

import asyncio
import logging
import random
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import requests

from airportpulse.models import FlightDeparture, ParkingLot, TrafficCondition, record_value
from airportpulse.ingestion.flightaware_client import (
    FlightAwareClient,
    departure_status,
    format_clock,
)
from airportpulse.analytics.scoring import round_half_up

logger = logging.getLogger(__name__)

# (flight number, destination, delay minutes)
SIMULATED_DEPARTURES = [
    ('AA 1423', 'LAX', 0),
    ('UA 892', 'ORD', 15),
    ('DL 1156', 'ATL', 45),
    ('SW 2047', 'PHX', 0),
    ('AA 2891', 'JFK', 5),
    ('UA 1654', 'SFO', 0),
    ('DL 2234', 'LAX', 30),
    ('SW 1877', 'LAS', 0),
]

TERMINALS = 'ABCDE'

# (location, category, daily rate, shuttle required, capacity)
PARKING_LOTS = [
    ('Terminal A', 'terminal', 24, False, 85),
    ('Terminal B', 'terminal', 24, False, 92),
    ('Terminal C', 'terminal', 24, False, 78),
    ('Terminal D', 'terminal', 24, False, 105),
    ('Terminal E', 'terminal', 24, False, 88),
    ('Express North', 'express', 18, True, 450),
    ('Express South', 'express', 18, True, 520),
    ('Remote South', 'remote', 14, True, 1200),
]

# Cumulative probability of (Full, Limited) by lot category; the rest is Available
PARKING_STATUS_ODDS = {
    'terminal': (0.3, 0.6),
    'express': (0.1, 0.3),
    'remote': (0.1, 0.3),
}

PARKING_STATUS_COLORS = {
    'Full': 'error',
    'Limited': 'warning',
    'Available': 'success',
}

TRAFFIC_ROUTES = [
    TrafficCondition(
        route='I-635 to DFW',
        status='Heavy Traffic',
        status_color='warning',
        travel_time=35,
        normal_time=22,
        incidents=[
            'Construction lane closures between Belt Line Rd and DFW exits',
            'Heavy congestion at Terminal C/D exits',
        ],
    ),
    TrafficCondition(
        route='I-35E to DFW',
        status='Moderate Delays',
        status_color='warning',
        travel_time=28,
        normal_time=20,
        incidents=['Airport construction causing backup at Terminal A/B exits'],
    ),
    TrafficCondition(
        route='Highway 121 to DFW',
        status='Free Flow',
        status_color='success',
        travel_time=15,
        normal_time=15,
    ),
    TrafficCondition(
        route='State Highway 114 to DFW',
        status='Light Traffic',
        status_color='success',
        travel_time=18,
        normal_time=16,
    ),
    TrafficCondition(
        route='I-30 to DFW',
        status='Heavy Traffic',
        status_color='error',
        travel_time=42,
        normal_time=25,
        incidents=[
            'Major construction on I-30 eastbound near DFW exits',
            'Lane closures affecting Terminal E access',
        ],
    ),
]


def summarize_departures(departures) -> dict:
    """
    On-time percentage, average delay and cancellations for a board.

    Accepts FlightDeparture records or their to_dict() form.

    An empty board reports typical DFW figures (85% on time, 12 min, 2).
    """
    if not departures:
        return {'onTimePercentage': 85, 'averageDelay': 12, 'cancellations': 2}

    statuses = [record_value(d, 'status') for d in departures]
    on_time = statuses.count('On Time')
    cancelled = statuses.count('Cancelled')
    total_delay = sum(record_value(d, 'delay_minutes', 'delayMinutes') or 0 for d in departures)

    return {
        'onTimePercentage': round_half_up(on_time / len(departures) * 100),
        'averageDelay': round_half_up(total_delay / len(departures)),
        'cancellations': cancelled,
    }


class FlightSignalSource:
    """Upcoming departures, live from FlightAware when configured."""

    def __init__(
        self,
        client: Optional[FlightAwareClient] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client or FlightAwareClient.from_config()
        self.rng = rng or random.Random()
        self.clock = clock or datetime.now

    async def fetch(self) -> List[FlightDeparture]:
        return await asyncio.to_thread(self.get_departures)

    def get_departures(self) -> List[FlightDeparture]:
        if not self.client.is_configured:
            return self.simulated_departures()

        try:
            departures = self.client.get_departures()
        except requests.RequestException as e:
            logger.warning(f'FlightAware unavailable, using simulated departures: {e}')
            return self.simulated_departures()

        if not departures:
            logger.info('No upcoming FlightAware departures, using simulated departures')
            return self.simulated_departures()

        return departures

    def simulated_departures(self) -> List[FlightDeparture]:
        """Canned DFW board with departures every 15 minutes from now."""
        now = self.clock()
        departures = []
        for index, (flight_number, destination, delay) in enumerate(SIMULATED_DEPARTURES):
            status, status_color = departure_status(delay)
            terminal = TERMINALS[index % len(TERMINALS)]
            departures.append(FlightDeparture(
                flight_number=flight_number,
                destination=destination,
                departure_time=format_clock(now + timedelta(minutes=index * 15 + 15)),
                status=status,
                status_color=status_color,
                delay_minutes=delay,
                gate=f'{terminal}{self.rng.randint(1, 30)}',
                terminal=f'Terminal {terminal}',
            ))
        return departures


class ParkingSignalSource:
    """
    Simulated lot availability.

    Terminal garages fill up more often than express and remote lots.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    async def fetch(self) -> List[ParkingLot]:
        return self.get_availability()

    def get_availability(self) -> List[ParkingLot]:
        lots = []
        for location, category, rate, shuttle, capacity in PARKING_LOTS:
            status = self._draw_status(category)
            lots.append(ParkingLot(
                location=location,
                category=category,
                status=status,
                status_color=PARKING_STATUS_COLORS[status],
                daily_rate=rate,
                shuttle_required=shuttle,
                available_spaces=self._available_spaces(status, capacity),
                total_spaces=capacity,
            ))
        return lots

    def _draw_status(self, category: str) -> str:
        full, limited = PARKING_STATUS_ODDS.get(category, PARKING_STATUS_ODDS['remote'])
        draw = self.rng.random()
        if draw < full:
            return 'Full'
        elif draw < limited:
            return 'Limited'
        return 'Available'

    def _available_spaces(self, status: str, capacity: int) -> int:
        if status == 'Full':
            return 0
        if status == 'Limited':
            return self.rng.randint(1, 10)
        # Available: 10-50% of capacity free
        return int(capacity * 0.1) + self.rng.randrange(0, max(1, int(capacity * 0.4)))


class TrafficSignalSource:
    """Current route conditions to the airport."""

    async def fetch(self) -> List[TrafficCondition]:
        return self.get_conditions()

    def get_conditions(self) -> List[TrafficCondition]:
        return [
            TrafficCondition(
                route=t.route,
                status=t.status,
                status_color=t.status_color,
                travel_time=t.travel_time,
                normal_time=t.normal_time,
                incidents=list(t.incidents),
            )
            for t in TRAFFIC_ROUTES
        ]
