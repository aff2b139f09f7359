"""Data models used throughout the project."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


def parse_local_time(value: str) -> Optional[datetime]:
    """Parse a provider timestamp (``2025-06-01T10:00:00.000``), ``None`` if unusable.

    Times are airport-local wall clock; any UTC offset is dropped.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value).replace(tzinfo=None)
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class FlightLeg:
    flight_number: str
    departure_time: str
    arrival_time: str
    duration: str
    price: Optional[Decimal]
    currency: str
    origin: str
    destination: str
    origin_name: str
    destination_name: str
    price_eur: Optional[Decimal] = None

    @property
    def departs_at(self) -> Optional[datetime]:
        return parse_local_time(self.departure_time)

    @property
    def arrives_at(self) -> Optional[datetime]:
        return parse_local_time(self.arrival_time)


@dataclass(frozen=True, slots=True)
class CandidateAirport:
    code: str
    name: str


@dataclass(frozen=True, slots=True)
class ConnectionRoute:
    """Two legs joined at ``layover_code``; totals are derived at pairing time."""

    layover_code: str
    layover_name: str
    leg1: FlightLeg
    leg2: FlightLeg
    layover_minutes: int
    total_duration_minutes: int
    total_price_eur: Optional[Decimal]


__all__ = ["FlightLeg", "CandidateAirport", "ConnectionRoute", "parse_local_time"]
