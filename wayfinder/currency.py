"""
currency – normalisation of fares to EUR.

Rates come from the Frankfurter API (``base=EUR``), so ``rates[X]`` is the
number of units of X per 1 EUR and ``amount / rates[X]`` converts X → EUR.
The table is fetched at most once per converter; any failure leaves a
table that only knows EUR.
"""

from __future__ import annotations

import logging
import threading
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

REFERENCE_CURRENCY = "EUR"
CENT = Decimal("0.01")


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


class CurrencyConverter:
    """Lazily loaded, read-mostly EUR rate table."""

    def __init__(
        self,
        rates_url: str = "https://api.frankfurter.dev/v1/latest",
        timeout: float = 10.0,
        rates: Optional[Dict[str, Decimal]] = None,
    ) -> None:
        self.rates_url = rates_url
        self.timeout = timeout
        self._rates: Dict[str, Decimal] = {}
        self._loaded = False
        self._lock = threading.Lock()
        if rates is not None:
            self._install(rates)

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def rates(self) -> Dict[str, Decimal]:
        return dict(self._rates)

    def _install(self, rates: Dict[str, Any]) -> None:
        table: Dict[str, Decimal] = {}
        for code, rate in rates.items():
            if rate is None or isinstance(rate, bool):
                logger.debug("Skipping rate %s=%r", code, rate)
                continue
            try:
                table[str(code).upper()] = Decimal(str(rate))
            except InvalidOperation:
                logger.debug("Skipping rate %s=%r", code, rate)
        table[REFERENCE_CURRENCY] = Decimal("1")
        self._rates = table
        self._loaded = True

    def load(self) -> None:
        """Fetch the rate table once; never raises."""
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            try:
                resp = requests.get(
                    self.rates_url,
                    params={"base": REFERENCE_CURRENCY},
                    timeout=self.timeout,
                )
                resp.raise_for_status()
                data = resp.json()
                raw = data.get("rates") if isinstance(data, dict) else None
                if not isinstance(raw, dict):
                    raise ValueError(f"unexpected rates payload: {str(data)[:120]}")
                self._install(raw)
                logger.info("Loaded %d exchange rates", len(self._rates))
            except (requests.RequestException, ValueError, InvalidOperation) as exc:
                logger.warning("Exchange rates unavailable, EUR only: %s", exc)
                self._install({})

    def to_eur(self, amount: Optional[Decimal], currency: str) -> Optional[Decimal]:
        """Convert *amount* in *currency* to EUR.

        Returns ``None`` when the currency is unknown, its rate is zero or
        there is no amount to convert. EUR amounts pass through unrounded.
        """
        self.load()
        if amount is None:
            return None

        currency = (currency or "").upper()
        if currency == REFERENCE_CURRENCY:
            return amount

        rate = self._rates.get(currency)
        if rate is None or rate == 0:
            return None

        return to_cents(Decimal(amount) / rate)


__all__ = ["CurrencyConverter", "REFERENCE_CURRENCY", "to_cents"]
