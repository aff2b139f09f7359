"""Plain-text rendering of search results for the command line."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from .currency import REFERENCE_CURRENCY
from .models import ConnectionRoute, FlightLeg


def money(currency: str, amount: Optional[Decimal]) -> str:
    if amount is None:
        return "?"
    return f"{currency} {amount:,.2f}"


def format_price(leg: FlightLeg) -> str:
    """``EUR 11.50 (PLN 49.00)`` style price, original fare in brackets."""
    eur = money(REFERENCE_CURRENCY, leg.price_eur) if leg.price_eur is not None else None

    if leg.currency == REFERENCE_CURRENCY:
        return eur or money(REFERENCE_CURRENCY, leg.price)

    original = money(leg.currency, leg.price)
    return f"{eur} ({original})" if eur is not None else original


def format_time(value: str) -> str:
    """``HH:MM`` of an ISO timestamp; the raw value if it is not one."""
    # Provider times look like 2025-06-01T10:05:00.000
    if len(value) >= 16 and value[10] == "T":
        return value[11:16]
    return value or "?"


def format_minutes(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    return f"{hours}h{mins}m" if hours > 0 else f"{mins}m"


def direct_line(leg: FlightLeg) -> str:
    dep = format_time(leg.departure_time)
    arr = format_time(leg.arrival_time)
    return f"  {leg.flight_number}  {dep} -> {arr}  ({leg.duration})  {format_price(leg)}"


def leg_line(leg: FlightLeg, prefix: str = "  |  ") -> str:
    dep = format_time(leg.departure_time)
    arr = format_time(leg.arrival_time)
    return (
        f"{prefix}{leg.flight_number}  {dep} -> {arr}  "
        f"{leg.origin} -> {leg.destination}  {format_price(leg)}"
    )


def route_lines(num: int, origin: str, destination: str, route: ConnectionRoute) -> List[str]:
    """Block of lines describing connection number *num*."""
    total = money(REFERENCE_CURRENCY, route.total_price_eur)
    dep = format_time(route.leg1.departure_time)
    arr = format_time(route.leg2.arrival_time)
    return [
        f"  Route {num}: {origin} -> {route.layover_code} -> {destination}  (total {total})",
        leg_line(route.leg1),
        f"  |  Layover: {format_minutes(route.layover_minutes)} at {route.layover_name}",
        leg_line(route.leg2),
        f"  |  Departs {dep} -> Arrives {arr}  "
        f"(total travel: {format_minutes(route.total_duration_minutes)})",
    ]


__all__ = [
    "money",
    "format_price",
    "format_time",
    "format_minutes",
    "direct_line",
    "leg_line",
    "route_lines",
]
