"""Typed reads and writes against the backend ledger tables."""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Optional

from portfolio_client.core.money import normalize_currency
from portfolio_client.core.timezone import format_timestamp, now_local, today_local
from portfolio_client.domain.models import (
    Stock,
    CashAccount,
    TransactionGroup,
    CashTransaction,
    StockTransaction,
    PortfolioPosition,
    PortfolioSettings,
    PortfolioSnapshot,
    HistoricalPrice,
    CurrencyRate,
    HistoricalPortfolioSnapshot,
    BenchmarkSnapshot,
)
from portfolio_client.remote.http_client import BackendClient
from portfolio_client.services.fx_rates import RateTable, resolve_rates_to_base
from portfolio_client.services.ledger_drafts import GroupDraft, CashLegDraft, StockLegDraft

logger = logging.getLogger(__name__)

# Backend tables
STOCKS_TABLE = "stocks_master"
CASH_ACCOUNTS_TABLE = "portfolio_cash_accounts"
GROUPS_TABLE = "transaction_groups"
CASH_TRANSACTIONS_TABLE = "cash_transactions"
STOCK_TRANSACTIONS_TABLE = "stock_transactions"
POSITIONS_TABLE = "portfolio_positions"
SETTINGS_TABLE = "user_portfolio_settings"
SNAPSHOTS_TABLE = "portfolio_snapshots"
PRICES_TABLE = "historical_prices"
RATES_TABLE = "currency_rates"
HISTORY_TABLE = "historical_portfolio_snapshots"
BENCHMARK_TABLE = "historical_benchmark_snapshots"


@dataclass
class PortfolioFetch:
    """Everything loaded for the dashboard in one fan-out."""

    settings: Optional[PortfolioSettings] = None
    positions: list[PortfolioPosition] = field(default_factory=list)
    accounts: list[CashAccount] = field(default_factory=list)
    stock_transactions: list[StockTransaction] = field(default_factory=list)
    cash_transactions: list[CashTransaction] = field(default_factory=list)
    # Full cash history, for account balances
    cash_ledger: list[CashTransaction] = field(default_factory=list)
    stocks: list[Stock] = field(default_factory=list)
    snapshot: Optional[PortfolioSnapshot] = None
    yesterday_snapshot: Optional[PortfolioSnapshot] = None


def _date_filter(operator: str, day: date) -> str:
    return f"{operator}.{day.isoformat()}"


def run_all(calls: dict[str, Callable[[], Any]], max_workers: int = 8) -> dict[str, Any]:
    """
    Run independent calls concurrently and wait for all of them.

    If any call fails, the first failure (in ``calls`` order) is raised and
    no result is returned, so callers never see a partial batch.
    """
    if not calls:
        return {}
    with ThreadPoolExecutor(max_workers=min(max_workers, len(calls))) as pool:
        futures = {name: pool.submit(call) for name, call in calls.items()}
        wait(futures.values())
    for name, future in futures.items():
        exc = future.exception()
        if exc is not None:
            logger.warning("Parallel fetch %s failed: %s", name, exc)
            raise exc
    return {name: future.result() for name, future in futures.items()}


class PortfolioDataService:
    """
    Backend data access for the cloud portfolio.

    Each method is one REST call (or one fan-out of calls) and returns
    decoded records; errors propagate from BackendClient unchanged.
    """

    def __init__(
        self,
        client: BackendClient,
        stock_transaction_limit: int = 500,
        cash_transaction_limit: int = 50,
        group_limit: int = 50,
    ):
        self._client = client
        self._stock_transaction_limit = stock_transaction_limit
        self._cash_transaction_limit = cash_transaction_limit
        self._group_limit = group_limit

    # Reads

    def fetch_positions(self) -> list[PortfolioPosition]:
        """Open positions (non-zero shares), by symbol."""
        return self._client.select(
            POSITIONS_TABLE,
            PortfolioPosition,
            {"total_shares": "gt.0", "order": "symbol.asc"},
        )

    def fetch_cash_accounts(self) -> list[CashAccount]:
        """Active (non-archived) cash accounts, by currency."""
        return self._client.select(
            CASH_ACCOUNTS_TABLE,
            CashAccount,
            {"archived_at": "is.null", "order": "currency.asc"},
        )

    def fetch_stocks(self) -> list[Stock]:
        return self._client.select(STOCKS_TABLE, Stock, {"order": "symbol.asc"})

    def fetch_transaction_groups(self, limit: Optional[int] = None) -> list[TransactionGroup]:
        return self._client.select(
            GROUPS_TABLE,
            TransactionGroup,
            {"order": "occurred_at.desc", "limit": limit or self._group_limit},
        )

    def fetch_stock_transactions(self, limit: Optional[int] = None) -> list[StockTransaction]:
        return self._client.select(
            STOCK_TRANSACTIONS_TABLE,
            StockTransaction,
            {"order": "trade_date.desc", "limit": limit or self._stock_transaction_limit},
        )

    def fetch_cash_transactions(self, limit: Optional[int] = None) -> list[CashTransaction]:
        return self._client.select(
            CASH_TRANSACTIONS_TABLE,
            CashTransaction,
            {"order": "occurred_at.desc", "limit": limit or self._cash_transaction_limit},
        )

    def fetch_all_cash_transactions(self) -> list[CashTransaction]:
        """Every cash leg, oldest first; used to compute account balances."""
        return self._client.select(
            CASH_TRANSACTIONS_TABLE,
            CashTransaction,
            {"order": "occurred_at.asc"},
        )

    def fetch_settings(self) -> Optional[PortfolioSettings]:
        rows = self._client.select(SETTINGS_TABLE, PortfolioSettings, {"limit": 1})
        return rows[0] if rows else None

    def fetch_latest_snapshot(self) -> Optional[PortfolioSnapshot]:
        rows = self._client.select(
            SNAPSHOTS_TABLE,
            PortfolioSnapshot,
            {"order": "snapshot_date.desc", "limit": 1},
        )
        return rows[0] if rows else None

    def fetch_yesterday_snapshot(self, today: Optional[date] = None) -> Optional[PortfolioSnapshot]:
        """Most recent snapshot dated before ``today`` (the day-change baseline)."""
        today = today or today_local()
        rows = self._client.select(
            SNAPSHOTS_TABLE,
            PortfolioSnapshot,
            {
                "snapshot_date": _date_filter("lt", today),
                "order": "snapshot_date.desc",
                "limit": 1,
            },
        )
        return rows[0] if rows else None

    def fetch_latest_price(self, symbol: str) -> Optional[Decimal]:
        rows = self._client.select(
            PRICES_TABLE,
            HistoricalPrice,
            {"symbol": f"eq.{symbol}", "order": "date.desc", "limit": 1},
        )
        return rows[0].price if rows else None

    def fetch_previous_close(self, symbol: str, today: Optional[date] = None) -> Optional[Decimal]:
        """Last price dated before ``today``."""
        today = today or today_local()
        rows = self._client.select(
            PRICES_TABLE,
            HistoricalPrice,
            {
                "symbol": f"eq.{symbol}",
                "date": _date_filter("lt", today),
                "order": "date.desc",
                "limit": 1,
            },
        )
        return rows[0].price if rows else None

    def fetch_latest_prices(self, symbols: list[str]) -> dict[str, Decimal]:
        """Latest price per symbol; symbols without any price are omitted."""
        results = run_all({s: (lambda s=s: self.fetch_latest_price(s)) for s in symbols})
        return {symbol: price for symbol, price in results.items() if price is not None}

    def fetch_previous_closes(
        self, symbols: list[str], today: Optional[date] = None
    ) -> dict[str, Decimal]:
        today = today or today_local()
        results = run_all(
            {s: (lambda s=s: self.fetch_previous_close(s, today)) for s in symbols}
        )
        return {symbol: price for symbol, price in results.items() if price is not None}

    def fetch_currency_rates(self, base: str = "USD") -> list[CurrencyRate]:
        """Rate rows touching ``base`` in either direction, newest first."""
        base = base.upper()
        results = run_all(
            {
                "direct": lambda: self._client.select(
                    RATES_TABLE,
                    CurrencyRate,
                    {"to_currency": f"eq.{base}", "order": "date.desc"},
                ),
                "inverted": lambda: self._client.select(
                    RATES_TABLE,
                    CurrencyRate,
                    {"from_currency": f"eq.{base}", "order": "date.desc"},
                ),
            }
        )
        return results["direct"] + results["inverted"]

    def fetch_rates_to_base(self, base: str = "USD") -> RateTable:
        return resolve_rates_to_base(self.fetch_currency_rates(base), base=base)

    def fetch_history_page(
        self,
        start: Optional[date],
        end: date,
        limit: int,
    ) -> list[HistoricalPortfolioSnapshot]:
        """One page of NAV history between ``start`` and ``end`` inclusive, newest first."""
        params = [("order", "snapshot_date.desc"), ("limit", limit)]
        if start is not None:
            params.append(("snapshot_date", _date_filter("gte", start)))
        params.append(("snapshot_date", _date_filter("lte", end)))
        return self._client.select(HISTORY_TABLE, HistoricalPortfolioSnapshot, params)

    def fetch_benchmark_page(
        self,
        symbol: str,
        start: Optional[date],
        end: date,
        limit: int,
    ) -> list[BenchmarkSnapshot]:
        """One page of index levels for ``symbol``, newest first."""
        params = [
            ("index_symbol", f"eq.{symbol}"),
            ("order", "snapshot_date.desc"),
            ("limit", limit),
        ]
        if start is not None:
            params.append(("snapshot_date", _date_filter("gte", start)))
        params.append(("snapshot_date", _date_filter("lte", end)))
        return self._client.select(BENCHMARK_TABLE, BenchmarkSnapshot, params)

    def fetch_all(self, today: Optional[date] = None) -> PortfolioFetch:
        """Load the dashboard collections in parallel; any failure fails the batch."""
        today = today or today_local()
        results = run_all(
            {
                "settings": self.fetch_settings,
                "positions": self.fetch_positions,
                "accounts": self.fetch_cash_accounts,
                "stock_transactions": self.fetch_stock_transactions,
                "cash_transactions": self.fetch_cash_transactions,
                "cash_ledger": self.fetch_all_cash_transactions,
                "stocks": self.fetch_stocks,
                "snapshot": self.fetch_latest_snapshot,
                "yesterday_snapshot": lambda: self.fetch_yesterday_snapshot(today),
            }
        )
        return PortfolioFetch(**results)

    # Ledger writes

    def create_group(self, draft: GroupDraft) -> TransactionGroup:
        return self._client.insert(GROUPS_TABLE, TransactionGroup, draft.to_payload())

    def create_stock_transaction(self, draft: StockLegDraft, group_id: str) -> StockTransaction:
        return self._client.insert(
            STOCK_TRANSACTIONS_TABLE, StockTransaction, draft.to_payload(group_id)
        )

    def create_cash_transaction(
        self,
        draft: CashLegDraft,
        group_id: str,
        related_stock_transaction_id: Optional[str] = None,
    ) -> CashTransaction:
        return self._client.insert(
            CASH_TRANSACTIONS_TABLE,
            CashTransaction,
            draft.to_payload(group_id, related_stock_transaction_id),
        )

    def delete_group_legs(self, group_id: str) -> int:
        """Delete every cash and stock leg of a group (cash legs first)."""
        removed = self._client.delete(CASH_TRANSACTIONS_TABLE, {"group_id": f"eq.{group_id}"})
        removed += self._client.delete(STOCK_TRANSACTIONS_TABLE, {"group_id": f"eq.{group_id}"})
        return removed

    def delete_group(self, group_id: str) -> None:
        self._client.delete_by_id(GROUPS_TABLE, group_id)

    # Master data

    def create_stock(
        self,
        symbol: str,
        name: str,
        market: str,
        currency: str,
        exchange: Optional[str] = None,
    ) -> Stock:
        payload = {
            "symbol": symbol.strip().upper(),
            "name": name.strip(),
            "market": market.strip().upper(),
            "currency": normalize_currency(currency),
        }
        if exchange and exchange.strip():
            payload["exchange"] = exchange.strip()
        return self._client.insert(STOCKS_TABLE, Stock, payload)

    def update_stock(self, stock_id: str, name: str, exchange: Optional[str] = None) -> Optional[Stock]:
        return self._client.update(
            STOCKS_TABLE,
            Stock,
            stock_id,
            {"name": name.strip(), "exchange": exchange.strip() if exchange else None},
        )

    def delete_stock(self, stock_id: str) -> None:
        self._client.delete_by_id(STOCKS_TABLE, stock_id)

    def create_cash_account(self, currency: str, display_name: str) -> CashAccount:
        return self._client.insert(
            CASH_ACCOUNTS_TABLE,
            CashAccount,
            {"currency": normalize_currency(currency), "display_name": display_name.strip()},
        )

    def archive_cash_account(
        self, account_id: str, when: Optional[datetime] = None
    ) -> Optional[CashAccount]:
        return self._client.update(
            CASH_ACCOUNTS_TABLE,
            CashAccount,
            account_id,
            {"archived_at": format_timestamp(when or now_local())},
        )
