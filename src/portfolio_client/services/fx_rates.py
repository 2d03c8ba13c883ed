"""FX rate resolution to the base currency."""

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Iterator, Optional

from portfolio_client.core.exceptions import FxRateUnavailableError
from portfolio_client.core.money import ONE, ZERO
from portfolio_client.domain.models import CurrencyRate


class RateTable(Mapping):
    """
    Read-only map of currency code to "units of base per one unit" rates.

    The base currency is always present at 1. Absence of any other code
    means the rate is unavailable; use ``require`` where a rate is mandatory.
    """

    def __init__(self, rates: Optional[Mapping] = None, base: str = "USD"):
        self._base = base.upper()
        self._rates: dict[str, Decimal] = {
            code.upper(): Decimal(rate) for code, rate in (rates or {}).items()
        }
        self._rates[self._base] = ONE

    def __getitem__(self, code: str) -> Decimal:
        return self._rates[code.upper()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"RateTable(base={self._base!r}, rates={self._rates!r})"

    @property
    def base(self) -> str:
        return self._base

    def get(self, code: str, default: Optional[Decimal] = None) -> Optional[Decimal]:
        return self._rates.get(code.upper(), default)

    def require(self, code: str) -> Decimal:
        """Return the rate for ``code`` or raise FxRateUnavailableError."""
        rate = self.get(code)
        if rate is None:
            raise FxRateUnavailableError([code.upper()])
        return rate

    def missing(self, codes: Iterable[str]) -> list[str]:
        """Return the codes among ``codes`` that have no rate."""
        return sorted({code.upper() for code in codes if self.get(code) is None})

    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        """Convert ``amount`` between two currencies through the base currency."""
        absent = self.missing([from_currency, to_currency])
        if absent:
            raise FxRateUnavailableError(absent)
        if from_currency.upper() == to_currency.upper():
            return amount
        return amount * self.require(from_currency) / self.require(to_currency)

    def as_dict(self) -> dict[str, Decimal]:
        return dict(self._rates)


def resolve_rates_to_base(rows: Iterable[CurrencyRate], base: str = "USD") -> RateTable:
    """
    Collapse rate rows into one rate per currency, expressed against ``base``.

    Direct rows (``X -> base``) and inverted rows (``base -> X``, rate
    ``1/rate``) each keep their most recent observation; when a currency has
    both, the later date wins and a tie keeps the direct row. Rows with a
    non-positive rate are skipped, so inversion never divides by zero. Rows
    that do not touch the base currency are ignored.
    """
    base = base.upper()
    direct: dict[str, tuple[datetime, Decimal]] = {}
    inverted: dict[str, tuple[datetime, Decimal]] = {}

    for row in rows:
        if row.rate <= ZERO:
            continue
        from_code = row.from_currency.upper()
        to_code = row.to_currency.upper()

        if to_code == base and from_code != base:
            current = direct.get(from_code)
            if current is None or row.date > current[0]:
                direct[from_code] = (row.date, row.rate)
        elif from_code == base and to_code != base:
            current = inverted.get(to_code)
            if current is None or row.date > current[0]:
                inverted[to_code] = (row.date, ONE / row.rate)

    resolved: dict[str, Decimal] = {}
    for code in set(direct) | set(inverted):
        direct_obs = direct.get(code)
        inverted_obs = inverted.get(code)
        if direct_obs and inverted_obs:
            chosen = inverted_obs if inverted_obs[0] > direct_obs[0] else direct_obs
        else:
            chosen = direct_obs or inverted_obs
        resolved[code] = chosen[1]

    return RateTable(resolved, base=base)
