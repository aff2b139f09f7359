from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Optional

import click

from .config import Settings, get_settings
from .currency import CurrencyConverter
from .formatting import direct_line, route_lines
from .route_finder import SORT_DURATION, SORT_KEYS, RouteFinder
from .ryanair_fetcher import RyanairFetcher

logger = logging.getLogger(__name__)

IATA_RE = re.compile(r"^[A-Z]{3}$")


def setup_logging(cfg: Settings) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if cfg.log_file:
        handlers.append(logging.FileHandler(cfg.log_file))
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        handlers=handlers,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def build_finder(cfg: Settings) -> RouteFinder:
    """Wire fetcher, converter and finder from *cfg*."""
    fetcher = RyanairFetcher(cfg.ryanair_url, timeout=cfg.http_timeout, market=cfg.market)
    converter = CurrencyConverter(cfg.rates_url, timeout=cfg.rates_timeout)
    return RouteFinder(
        fetcher,
        converter,
        min_layover_minutes=cfg.min_layover_min,
        max_workers=cfg.max_workers,
    )


def _airport(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> str:
    code = (value or "").strip().upper()
    if not IATA_RE.match(code):
        raise click.BadParameter("airport codes must be 3 letter IATA codes (e.g. BER, DUB)")
    return code


def _date(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> dt.date:
    if not value or not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value):
        raise click.BadParameter("date must be in YYYY-MM-DD format")
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"{value} is not a calendar date")


@click.group()
def cli() -> None:
    """Find a way to fly from A to B with Ryanair, including layovers."""
    setup_logging(get_settings())


@cli.command("find-way")
@click.option("--from", "origin", required=True, callback=_airport, help="Origin airport IATA code (e.g. BER)")
@click.option("--to", "destination", required=True, callback=_airport, help="Destination airport IATA code (e.g. DUB)")
@click.option("--date", "date", required=True, callback=_date, help="Travel date in YYYY-MM-DD format")
@click.option(
    "--sort",
    type=click.Choice(SORT_KEYS, case_sensitive=False),
    default=SORT_DURATION,
    show_default=True,
    help="Order connections by total duration or EUR price",
)
@click.pass_context
def find_way(ctx: click.Context, origin: str, destination: str, date: dt.date, sort: str) -> None:
    """Search direct flights, then one-stop connections."""
    logger.debug("find-way %s->%s on %s, sort=%s", origin, destination, date, sort)
    finder = build_finder(get_settings())

    click.secho(f"Searching direct flights {origin} -> {destination} on {date}...", fg="blue")
    direct = finder.find_direct(origin, destination, date)
    if direct:
        click.echo()
        click.secho(f"Direct: {origin} -> {destination} on {date}", fg="green")
        click.echo()
        for leg in direct:
            click.echo(direct_line(leg))
        return

    click.echo("No direct flights found. Searching connections...")
    click.echo()

    sort = sort.lower()
    routes = finder.find_connections(origin, destination, date, sort)
    if not routes:
        click.secho(f"No routes found from {origin} to {destination} on {date}.", fg="yellow")
        ctx.exit(1)

    label = "total duration" if sort == SORT_DURATION else "price"
    click.secho(f"Found {len(routes)} connecting route(s), sorted by {label}:", fg="blue")
    click.echo()
    for num, route in enumerate(routes, start=1):
        header, *body, summary = route_lines(num, origin, destination, route)
        click.secho(header, fg="green")
        for line in body:
            click.secho(line, fg="yellow" if "Layover:" in line else None)
        click.secho(summary, fg="cyan")
        click.echo()


if __name__ == "__main__":
    cli()
