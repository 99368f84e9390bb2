"""
Signal records - normalized output of the live data sources.

The forecast engine only needs a few fields from each record (delay,
capacity, incident text). Records may also arrive as decoded JSON
mappings, so the scorers read fields through record_value() instead of
attribute access.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional


def record_value(record: Any, *names: str) -> Any:
    """
    Read the first present field from a dataclass or mapping record.

    Accepts several spellings (e.g. 'available_spaces', 'availableSpaces')
    and returns None when none of them is set.
    """
    for name in names:
        if isinstance(record, Mapping):
            value = record.get(name)
        else:
            value = getattr(record, name, None)
        if value is not None:
            return value
    return None


def _record_dict(record: Any) -> dict:
    if isinstance(record, Mapping):
        return dict(record)
    return record.to_dict()


@dataclass
class FlightDeparture:
    """An upcoming departure from the airport."""
    flight_number: str
    destination: str
    departure_time: str
    status: str  # On Time, Delayed 15m, Cancelled, Diverted
    status_color: str
    delay_minutes: int = 0
    gate: Optional[str] = None
    terminal: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'flightNumber': self.flight_number,
            'destination': self.destination,
            'departureTime': self.departure_time,
            'status': self.status,
            'statusColor': self.status_color,
            'delayMinutes': self.delay_minutes,
            'gate': self.gate,
            'terminal': self.terminal,
        }


@dataclass
class ParkingLot:
    """
    Availability of one parking facility.

    Capacity fields are optional: some sources only publish a status.
    """
    location: str
    category: str  # terminal, express, remote
    status: str  # Available, Limited, Full
    status_color: str
    daily_rate: int
    shuttle_required: bool = False
    available_spaces: Optional[int] = None
    total_spaces: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            'location': self.location,
            'category': self.category,
            'status': self.status,
            'statusColor': self.status_color,
            'dailyRate': self.daily_rate,
            'shuttleRequired': self.shuttle_required,
            'availableSpaces': self.available_spaces,
            'totalSpaces': self.total_spaces,
        }


@dataclass
class TrafficCondition:
    """Driving conditions on one route to the airport."""
    route: str
    status: str  # Free Flow, Light Traffic, Moderate Delays, Heavy Traffic
    status_color: str
    travel_time: int  # minutes
    normal_time: int  # minutes
    incidents: List[str] = field(default_factory=list)

    @property
    def description(self) -> str:
        """Free text scanned by the traffic scorer."""
        return '; '.join([self.status] + list(self.incidents))

    def to_dict(self) -> dict:
        return {
            'route': self.route,
            'status': self.status,
            'statusColor': self.status_color,
            'travelTime': self.travel_time,
            'normalTime': self.normal_time,
            'incidents': list(self.incidents),
        }


@dataclass
class SignalSnapshot:
    """Joined result of one concurrent fetch of all signal sources."""
    flights: List[FlightDeparture]
    parking: List[ParkingLot]
    traffic: List[TrafficCondition]
    fetched_at: datetime

    def to_dict(self) -> dict:
        return {
            'flights': [_record_dict(f) for f in self.flights],
            'parking': [_record_dict(p) for p in self.parking],
            'traffic': [_record_dict(t) for t in self.traffic],
            'fetchedAt': self.fetched_at.isoformat(),
        }
