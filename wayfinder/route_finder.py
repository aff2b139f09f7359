# -*- coding: utf-8 -*-
"""
route_finder – direct flights first, one-stop connections otherwise.

Connection search:
  candidates = destinations(origin) ∩ destinations(destination)
  leg1 = flights(origin → candidate), leg2 = flights(candidate → destination)
  keep (leg1, leg2) when leg2.departure - leg1.arrival >= min layover
"""

from __future__ import annotations

import datetime as dt
import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .currency import CurrencyConverter, to_cents
from .models import CandidateAirport, ConnectionRoute, FlightLeg
from .ryanair_fetcher import RyanairFetcher

logger = logging.getLogger(__name__)

MIN_LAYOVER_MINUTES = 60
SORT_PRICE = "price"
SORT_DURATION = "duration"
SORT_KEYS = (SORT_PRICE, SORT_DURATION)


def minutes_between(start: dt.datetime, end: dt.datetime) -> int:
    """Signed whole minutes from *start* to *end*, floored."""
    return int((end - start).total_seconds() // 60)


def candidate_airports(
    from_origin: Dict[str, str], to_destination: Dict[str, str]
) -> List[CandidateAirport]:
    """Airports present in both route maps, in *from_origin* order."""
    return [
        CandidateAirport(code=code, name=name)
        for code, name in from_origin.items()
        if code in to_destination
    ]


def sort_routes(routes: Iterable[ConnectionRoute], sort: str = SORT_PRICE) -> List[ConnectionRoute]:
    """Stable sort; by price unknown totals go last."""
    if sort == SORT_DURATION:
        return sorted(routes, key=lambda r: r.total_duration_minutes)
    return sorted(
        routes,
        key=lambda r: (
            r.total_price_eur is None,
            r.total_price_eur if r.total_price_eur is not None else Decimal(0),
        ),
    )


class RouteFinder:
    """Search engine combining the Ryanair fetcher with EUR normalisation."""

    def __init__(
        self,
        fetcher: RyanairFetcher,
        converter: CurrencyConverter,
        *,
        min_layover_minutes: int = MIN_LAYOVER_MINUTES,
        max_workers: Optional[int] = None,
    ) -> None:
        self.fetcher = fetcher
        self.converter = converter
        self.min_layover_minutes = min_layover_minutes
        self.max_workers = max_workers

    def _pool_size(self, fetches: int) -> int:
        """One worker per fetch unless *max_workers* caps it."""
        size = max(1, fetches)
        if self.max_workers is not None:
            size = min(size, self.max_workers)
        return size

    def _with_eur(self, leg: FlightLeg) -> FlightLeg:
        return replace(leg, price_eur=self.converter.to_eur(leg.price, leg.currency))

    # ──────────────────────────────────────────────────────────

    def find_direct(self, origin: str, destination: str, date: dt.date) -> List[FlightLeg]:
        """Non-stop flights with EUR prices; empty means "try connections"."""
        available = self.fetcher.available_dates(origin, destination)
        if date not in available:
            logger.info("No direct fares %s->%s on %s", origin, destination, date)
            return []

        flights = self.fetcher.flights(origin, destination, date)
        return [self._with_eur(leg) for leg in flights]

    def find_connections(
        self,
        origin: str,
        destination: str,
        date: dt.date,
        sort: str = SORT_PRICE,
    ) -> List[ConnectionRoute]:
        """One-stop itineraries sorted by *sort* (``price`` or ``duration``)."""
        with ThreadPoolExecutor(max_workers=2) as executor:
            out_routes = executor.submit(self.fetcher.destinations, origin)
            in_routes = executor.submit(self.fetcher.destinations, destination)
            candidates = candidate_airports(
                self._settled(out_routes, {}, f"routes from {origin}"),
                self._settled(in_routes, {}, f"routes from {destination}"),
            )
        if not candidates:
            logger.info("No layover candidates between %s and %s", origin, destination)
            return []

        logger.info(
            "Checking %d layover candidates for %s->%s on %s",
            len(candidates),
            origin,
            destination,
            date,
        )
        futures: Dict[Tuple[str, int], Future] = {}
        with ThreadPoolExecutor(max_workers=self._pool_size(2 * len(candidates))) as executor:
            for cand in candidates:
                futures[(cand.code, 1)] = executor.submit(
                    self.fetcher.flights, origin, cand.code, date
                )
                futures[(cand.code, 2)] = executor.submit(
                    self.fetcher.flights, cand.code, destination, date
                )
            wait(futures.values())

        routes: List[ConnectionRoute] = []
        for cand in candidates:
            outbound = self._settled(futures[(cand.code, 1)], [], f"{origin}->{cand.code}")
            inbound = self._settled(futures[(cand.code, 2)], [], f"{cand.code}->{destination}")
            if not outbound or not inbound:
                continue
            routes.extend(self.pair_legs(cand, outbound, inbound))

        logger.info("Found %d connections %s->%s", len(routes), origin, destination)
        return sort_routes(routes, sort)

    def pair_legs(
        self,
        layover: CandidateAirport,
        outbound: List[FlightLeg],
        inbound: List[FlightLeg],
    ) -> List[ConnectionRoute]:
        """Cross product of both legs, dropping pairs with too short a layover."""
        routes: List[ConnectionRoute] = []
        for leg1 in outbound:
            for leg2 in inbound:
                route = self._connect(layover, leg1, leg2)
                if route is not None:
                    routes.append(route)
        return routes

    def _connect(
        self, layover: CandidateAirport, leg1: FlightLeg, leg2: FlightLeg
    ) -> Optional[ConnectionRoute]:
        departs, arrives = leg1.departs_at, leg2.arrives_at
        lands, takes_off = leg1.arrives_at, leg2.departs_at
        if None in (departs, arrives, lands, takes_off):
            logger.debug(
                "Skipping %s/%s via %s: unparsable times",
                leg1.flight_number,
                leg2.flight_number,
                layover.code,
            )
            return None

        layover_minutes = minutes_between(lands, takes_off)
        if layover_minutes < self.min_layover_minutes:
            return None

        leg1 = self._with_eur(leg1)
        leg2 = self._with_eur(leg2)
        total: Optional[Decimal] = None
        if leg1.price_eur is not None and leg2.price_eur is not None:
            total = to_cents(leg1.price_eur + leg2.price_eur)

        return ConnectionRoute(
            layover_code=layover.code,
            layover_name=layover.name,
            leg1=leg1,
            leg2=leg2,
            layover_minutes=layover_minutes,
            total_duration_minutes=minutes_between(departs, arrives),
            total_price_eur=total,
        )

    @staticmethod
    def _settled(future: Future, empty, label: str):
        """Result of a finished *future*, or *empty* if it raised."""
        try:
            return future.result()
        except Exception as exc:
            logger.warning("Fetch %s failed: %s", label, exc)
            return empty


__all__ = [
    "RouteFinder",
    "MIN_LAYOVER_MINUTES",
    "SORT_PRICE",
    "SORT_DURATION",
    "SORT_KEYS",
    "candidate_airports",
    "minutes_between",
    "sort_routes",
]
