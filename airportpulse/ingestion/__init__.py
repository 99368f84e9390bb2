"""
Data ingestion module for AirportPulse.

Handles the live signal sources (FlightAware departures, parking,
road traffic) and the refresh pipeline that turns them into the
published forecast.
"""

from airportpulse.ingestion.flightaware_client import FlightAwareClient
from airportpulse.ingestion.sources import (
    FlightSignalSource,
    ParkingSignalSource,
    TrafficSignalSource,
    summarize_departures,
)
from airportpulse.ingestion.pipeline import RefreshPipeline

__all__ = [
    'FlightAwareClient',
    'FlightSignalSource',
    'ParkingSignalSource',
    'TrafficSignalSource',
    'summarize_departures',
    'RefreshPipeline',
]
