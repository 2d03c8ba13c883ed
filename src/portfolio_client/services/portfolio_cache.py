"""Offline cache of the last-fetched portfolio state."""

import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional

import pytz
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from portfolio_client.domain.models import (
    Stock,
    CashAccount,
    CashTransaction,
    StockTransaction,
    PortfolioPosition,
    PortfolioSettings,
    PortfolioSnapshot,
)
from portfolio_client.repositories.protocols import CacheRepository

logger = logging.getLogger(__name__)

# Bump whenever a cached shape changes; a mismatch wipes the cache on start
CACHE_SCHEMA_VERSION = 3


@dataclass
class PortfolioState:
    """Every collection the dashboard works from."""

    settings: Optional[PortfolioSettings] = None
    positions: list[PortfolioPosition] = field(default_factory=list)
    accounts: list[CashAccount] = field(default_factory=list)
    stock_transactions: list[StockTransaction] = field(default_factory=list)
    cash_transactions: list[CashTransaction] = field(default_factory=list)
    cash_ledger: list[CashTransaction] = field(default_factory=list)
    stocks: list[Stock] = field(default_factory=list)
    snapshot: Optional[PortfolioSnapshot] = None
    yesterday_snapshot: Optional[PortfolioSnapshot] = None
    latest_prices: dict[str, Decimal] = field(default_factory=dict)
    previous_closes: dict[str, Decimal] = field(default_factory=dict)
    rates: dict[str, Decimal] = field(default_factory=dict)


_ADAPTERS: dict[str, TypeAdapter] = {
    "settings": TypeAdapter(Optional[PortfolioSettings]),
    "positions": TypeAdapter(list[PortfolioPosition]),
    "accounts": TypeAdapter(list[CashAccount]),
    "stock_transactions": TypeAdapter(list[StockTransaction]),
    "cash_transactions": TypeAdapter(list[CashTransaction]),
    "cash_ledger": TypeAdapter(list[CashTransaction]),
    "stocks": TypeAdapter(list[Stock]),
    "snapshot": TypeAdapter(Optional[PortfolioSnapshot]),
    "yesterday_snapshot": TypeAdapter(Optional[PortfolioSnapshot]),
    "latest_prices": TypeAdapter(dict[str, Decimal]),
    "previous_closes": TypeAdapter(dict[str, Decimal]),
    "rates": TypeAdapter(dict[str, Decimal]),
}

STATE_KEYS = tuple(f.name for f in fields(PortfolioState))


class PortfolioCache:
    """
    Persists PortfolioState one collection per entry.

    Entries are JSON written with pydantic. An entry that no longer decodes
    is logged and treated as missing rather than failing the load.
    """

    def __init__(self, repo: CacheRepository):
        self._repo = repo

    def ensure_schema(self) -> None:
        """Wipe the cache if it was written with another schema version."""
        version = self._repo.get_schema_version()
        if version == CACHE_SCHEMA_VERSION:
            return
        if version is not None:
            logger.info(
                "Cache schema %s does not match %s, clearing cache",
                version,
                CACHE_SCHEMA_VERSION,
            )
        self._repo.clear()
        self._repo.set_schema_version(CACHE_SCHEMA_VERSION)

    def save_state(self, state: PortfolioState, only: Optional[Iterable[str]] = None) -> None:
        """Write ``state`` (or just the ``only`` collections) and stamp the cache."""
        keys = STATE_KEYS if only is None else tuple(only)
        for key in keys:
            value: Any = getattr(state, key)
            self._repo.put_entry(key, _ADAPTERS[key].dump_json(value).decode("utf-8"))
        self._repo.set_last_updated(datetime.now(pytz.utc).replace(tzinfo=None))

    def load_state(self) -> Optional[PortfolioState]:
        """Return the cached state, or None when nothing was ever cached."""
        if not self.has_cached_data():
            return None
        state = PortfolioState()
        for key in STATE_KEYS:
            payload = self._repo.get_entry(key)
            if payload is None:
                continue
            try:
                setattr(state, key, _ADAPTERS[key].validate_json(payload))
            except PydanticValidationError as exc:
                logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
        return state

    def has_cached_data(self) -> bool:
        return self.last_updated() is not None

    def last_updated(self) -> Optional[datetime]:
        """When the cache was last written, as an aware UTC datetime."""
        when = self._repo.get_last_updated()
        if when is None:
            return None
        return pytz.utc.localize(when) if when.tzinfo is None else when

    def clear(self) -> None:
        """Drop every entry; the schema version is recorded again."""
        self._repo.clear()
        self._repo.set_schema_version(CACHE_SCHEMA_VERSION)
