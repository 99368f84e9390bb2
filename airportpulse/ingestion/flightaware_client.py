"""
FlightAware AeroAPI client for live departures.

Only the departure board is used, and only the fields the congestion
engine and dashboard need:

    ident / ident_iata   - flight number
    destination.code     - destination airport
    scheduled_out        - scheduled gate departure (ISO 8601, UTC)
    estimated_out        - current estimate, if any
    actual_out           - actual gate departure, if departed
    cancelled / diverted - status flags
    gate_origin, terminal_origin

Delay is measured as (actual or estimated or scheduled) - scheduled.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import requests

from airportpulse.config import config
from airportpulse.models import FlightDeparture
from airportpulse.analytics.scoring import round_half_up

logger = logging.getLogger(__name__)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an AeroAPI ISO 8601 timestamp ('...Z') into an aware datetime."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None


def format_clock(moment: datetime) -> str:
    """Dashboard time label, e.g. '7:05 PM'."""
    suffix = 'AM' if moment.hour < 12 else 'PM'
    return f'{moment.hour % 12 or 12}:{moment.minute:02d} {suffix}'


def departure_status(delay_minutes: int, cancelled: bool = False, diverted: bool = False):
    """
    Status label and color for a departure.

    Returns (status, status_color): cancelled/diverted and delays over
    30 minutes are errors, shorter delays warnings.
    """
    if cancelled:
        return 'Cancelled', 'error'
    if diverted:
        return 'Diverted', 'error'
    if delay_minutes == 0:
        return 'On Time', 'success'
    if delay_minutes <= 30:
        return f'Delayed {delay_minutes}m', 'warning'
    return f'Delayed {delay_minutes}m', 'error'


def parse_departure(raw: Dict[str, Any]) -> Optional[FlightDeparture]:
    """
    Convert one AeroAPI departure into a FlightDeparture.

    Returns None when the record has no scheduled departure time.
    """
    scheduled = parse_timestamp(raw.get('scheduled_out'))
    if scheduled is None:
        return None

    compare = (
        parse_timestamp(raw.get('actual_out'))
        or parse_timestamp(raw.get('estimated_out'))
        or scheduled
    )
    delay_minutes = max(0, round_half_up((compare - scheduled).total_seconds() / 60))
    status, status_color = departure_status(
        delay_minutes,
        cancelled=bool(raw.get('cancelled')),
        diverted=bool(raw.get('diverted')),
    )

    destination = raw.get('destination') or {}

    return FlightDeparture(
        flight_number=raw.get('ident_iata') or raw.get('ident') or 'Unknown',
        destination=destination.get('code') or 'Unknown',
        departure_time=format_clock(scheduled.astimezone()),
        status=status,
        status_color=status_color,
        delay_minutes=delay_minutes,
        gate=raw.get('gate_origin') or 'TBD',
        terminal=raw.get('terminal_origin') or 'Unknown',
    )


class FlightAwareClient:
    """
    Client for the AeroAPI departures endpoint.

    Handles:
    - API key header authentication
    - Filtering to departures in the next few hours
    - Error logging (errors are re-raised for the caller to degrade)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = 'https://aeroapi.flightaware.com/aeroapi',
        airport_code: str = 'KDFW',
        timeout: int = 30,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.airport_code = airport_code
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({'Accept': 'application/json'})
        if api_key:
            self.session.headers.update({'x-apikey': api_key})
            logger.info('FlightAware client initialized with API key')
        else:
            logger.warning('FlightAware API key not configured - using simulated departures')

    @classmethod
    def from_config(cls) -> 'FlightAwareClient':
        """Create client from application configuration."""
        return cls(
            api_key=config.flightaware.api_key,
            base_url=config.flightaware.base_url,
            airport_code=config.flightaware.airport_code,
            timeout=config.flightaware.timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def get_departures(
        self,
        window_hours: float = 3,
        limit: int = 5,
        now: Optional[datetime] = None,
    ) -> List[FlightDeparture]:
        """
        Fetch upcoming departures.

        Keeps flights scheduled within `window_hours` from now, earliest
        first, at most `limit` of them.

        Raises:
            requests.RequestException on network/API errors
        """
        url = f'{self.base_url}/airports/{self.airport_code}/flights/departures'
        params = {'max_pages': 1}

        logger.debug(f'Fetching departures: {url}')

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.Timeout:
            logger.error('FlightAware API timeout')
            raise
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 429:
                logger.warning('FlightAware rate limit exceeded')
            else:
                logger.error(f'FlightAware API error: {e}')
            raise
        except requests.exceptions.RequestException as e:
            logger.error(f'FlightAware request failed: {e}')
            raise

        raw_departures = data.get('departures') or []
        logger.info(f'Received {len(raw_departures)} departures from FlightAware')

        now = now or datetime.now(timezone.utc)
        horizon = now + timedelta(hours=window_hours)

        upcoming = []
        for raw in raw_departures:
            scheduled = parse_timestamp(raw.get('scheduled_out'))
            if scheduled and now <= scheduled <= horizon:
                upcoming.append((scheduled, raw))
        upcoming.sort(key=lambda item: item[0])

        departures = []
        for _, raw in upcoming[:limit]:
            departure = parse_departure(raw)
            if departure:
                departures.append(departure)

        logger.debug(f'Kept {len(departures)} departures in the next {window_hours}h')
        return departures
