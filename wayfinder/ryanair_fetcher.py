from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Set

import requests

from .models import FlightLeg

logger = logging.getLogger(__name__)


class RyanairFetcherError(RuntimeError):
    """Unusable response from the Ryanair API."""


# One adult, one way, exact date, no promo code, no connecting flights.
FARE_QUERY: Dict[str, Any] = {
    "ADT": 1,
    "CHD": 0,
    "DateIn": "",
    "Disc": 0,
    "INF": 0,
    "TEEN": 0,
    "promoCode": "",
    "IncludeConnectingFlights": "false",
    "FlexDaysBeforeOut": 0,
    "FlexDaysOut": 0,
    "FlexDaysBeforeIn": 0,
    "FlexDaysIn": 0,
    "RoundTrip": "false",
    "ToUs": "AGREED",
}


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _records(parent: Any, key: str) -> List[Dict[str, Any]]:
    items = parent.get(key) if isinstance(parent, dict) else None
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def parse_flights(data: Any) -> List[FlightLeg]:
    """Walk ``trips → dates → flights`` of an availability payload.

    Flights without a ``regularFare`` block are sold out and skipped. The
    currency is response-wide.
    """
    if not isinstance(data, dict):
        raise RyanairFetcherError(f"expected an object, got {type(data).__name__}")

    currency = data.get("currency") or "EUR"
    legs: List[FlightLeg] = []

    for trip in _records(data, "trips"):
        for date_entry in _records(trip, "dates"):
            for flight in _records(date_entry, "flights"):
                regular = flight.get("regularFare")
                if not regular:
                    continue

                fares = _records(regular, "fares") or [{}]
                times = flight.get("time")
                if not isinstance(times, list):
                    times = []
                legs.append(
                    FlightLeg(
                        flight_number=flight.get("flightNumber") or "",
                        departure_time=times[0] if len(times) > 0 else "",
                        arrival_time=times[1] if len(times) > 1 else "",
                        duration=flight.get("duration") or "",
                        price=_to_decimal(fares[0].get("amount")),
                        currency=currency,
                        origin=trip.get("origin") or "",
                        destination=trip.get("destination") or "",
                        origin_name=trip.get("originName") or "",
                        destination_name=trip.get("destinationName") or "",
                    )
                )
    return legs


class RyanairFetcher:
    """
    Read-only client for the public Ryanair endpoints.

    Every public method degrades to an empty result on transport or payload
    problems; callers cannot tell "no service" from "request failed".
    """

    def __init__(
        self,
        base_url: str = "https://www.ryanair.com/api",
        *,
        timeout: float = 15.0,
        market: str = "en-gb",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.market = market

    # ──────────────────────────────────────────────────────────

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        resp = requests.get(
            url,
            params=params,
            timeout=self.timeout,
            headers={"Accept": "application/json"},
        )
        if resp.status_code != 200:
            raise RyanairFetcherError(f"HTTP {resp.status_code} – {resp.text[:120]}")
        try:
            return resp.json()
        except ValueError as exc:
            raise RyanairFetcherError(f"invalid JSON from {path}") from exc

    def available_dates(self, origin: str, destination: str) -> Set[dt.date]:
        """Dates with one-way fares on *origin* → *destination*."""
        path = f"/farfnd/v4/oneWayFares/{origin}/{destination}/availabilities"
        try:
            data = self._get_json(path)
            if not isinstance(data, list):
                raise RyanairFetcherError("availabilities payload is not a list")
        except (requests.RequestException, RyanairFetcherError) as exc:
            logger.warning("Availability %s->%s unavailable: %s", origin, destination, exc)
            return set()

        dates: Set[dt.date] = set()
        for raw in data:
            try:
                dates.add(dt.date.fromisoformat(str(raw)[:10]))
            except ValueError:
                logger.debug("Skipping malformed date %r", raw)
        return dates

    def destinations(self, airport: str) -> Dict[str, str]:
        """Map of IATA code → airport name served from *airport*."""
        path = f"/views/locate/searchWidget/routes/en/airport/{airport}"
        try:
            data = self._get_json(path)
            if not isinstance(data, list):
                raise RyanairFetcherError("routes payload is not a list")
        except (requests.RequestException, RyanairFetcherError) as exc:
            logger.warning("Routes from %s unavailable: %s", airport, exc)
            return {}

        codes: Dict[str, str] = {}
        for route in data:
            arrival = route.get("arrivalAirport") if isinstance(route, dict) else None
            code = arrival.get("code") if isinstance(arrival, dict) else None
            if code:
                codes[code] = arrival.get("name") or code
        logger.debug("%s serves %d airports", airport, len(codes))
        return codes

    def flights(self, origin: str, destination: str, date: dt.date) -> List[FlightLeg]:
        """Bookable non-stop flights on *date*, in provider order."""
        params = dict(FARE_QUERY)
        params.update(
            {"Origin": origin, "Destination": destination, "DateOut": date.isoformat()}
        )
        path = f"/booking/v4/{self.market}/availability"
        try:
            legs = parse_flights(self._get_json(path, params))
        except (requests.RequestException, RyanairFetcherError) as exc:
            logger.warning(
                "Flights %s->%s on %s unavailable: %s", origin, destination, date, exc
            )
            return []

        logger.debug("%s->%s on %s: %d flights", origin, destination, date, len(legs))
        return legs


__all__ = ["RyanairFetcher", "RyanairFetcherError", "FARE_QUERY", "parse_flights"]
