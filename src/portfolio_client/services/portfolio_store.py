"""Presentation-facing owner of the cloud portfolio state."""

import logging
import threading
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

import pytz

from portfolio_client.core.exceptions import RemoteError
from portfolio_client.core.money import ZERO
from portfolio_client.core.timezone import get_local_tz, now_local
from portfolio_client.domain.models import CashAccount, Stock, PendingGroup, CASH_FLOW_LEG_TYPES
from portfolio_client.domain.views import (
    CashBalances,
    PortfolioSummary,
    PositionMetrics,
    EntryPreview,
    SubmissionResult,
    ReconciliationReport,
)
from portfolio_client.services.fx_rates import RateTable
from portfolio_client.services.portfolio_cache import PortfolioCache, PortfolioState
from portfolio_client.services.portfolio_data_service import PortfolioDataService, run_all
from portfolio_client.services.transaction_builder import TransactionBuilder, TransactionEntry
from portfolio_client.services.transaction_submitter import TransactionSubmitter
from portfolio_client.services.valuation import (
    HoldingSortOption,
    build_position_metrics,
    compute_cash_balances,
    dividend_income,
    sort_positions,
    summarize,
    today_cash_flow,
    total_holdings_value,
    transaction_count,
)

logger = logging.getLogger(__name__)


class PortfolioStore:
    """
    Holds the portfolio state one screen works from.

    State starts from the offline cache and is replaced as a whole when a
    fetch completes. Every load takes a new generation number; a load that
    finishes after a newer one has started is discarded, so a slow stale
    response never overwrites fresher data.
    """

    def __init__(
        self,
        data_service: PortfolioDataService,
        cache: PortfolioCache,
        submitter: TransactionSubmitter,
        default_base_currency: str = "USD",
        allow_zero_net_dividend: bool = True,
        price_refresh_interval_seconds: int = 1200,
        cash_flow_leg_types: frozenset = CASH_FLOW_LEG_TYPES,
        tz: Optional[pytz.BaseTzInfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._data = data_service
        self._cache = cache
        self._submitter = submitter
        self._default_base_currency = default_base_currency.upper()
        self._allow_zero_net_dividend = allow_zero_net_dividend
        self._price_refresh_interval = price_refresh_interval_seconds
        self._cash_flow_leg_types = cash_flow_leg_types
        self._tz = tz or get_local_tz()
        self._clock = clock or (lambda: now_local(self._tz))

        self._lock = threading.Lock()
        self._generation = 0
        self._state = PortfolioState()
        self._has_loaded = False
        self._last_load: Optional[datetime] = None

    # State

    @property
    def state(self) -> PortfolioState:
        return self._state

    @property
    def base_currency(self) -> str:
        settings = self._state.settings
        return settings.base_currency.upper() if settings else self._default_base_currency

    @property
    def rates(self) -> RateTable:
        return RateTable(self._state.rates, base=self.base_currency)

    @property
    def last_updated(self) -> Optional[datetime]:
        return self._cache.last_updated()

    def load_cached(self) -> bool:
        """Show cached data immediately, if any was cached."""
        cached = self._cache.load_state()
        if cached is None:
            return False
        with self._lock:
            self._state = cached
        return True

    def _begin(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _commit(
        self,
        generation: int,
        state: PortfolioState,
        only: Optional[list[str]] = None,
    ) -> bool:
        """Replace and cache the state unless a newer load has started since ``generation``."""
        with self._lock:
            if generation != self._generation:
                logger.info("Discarding stale load %d (current %d)", generation, self._generation)
                return False
            self._state = state
            self._cache.save_state(state, only=only)
            return True

    def _today(self) -> date:
        return self._clock().astimezone(self._tz).date()

    def _symbols(self, state: PortfolioState) -> list[str]:
        symbols = [s.symbol for s in state.stocks]
        return symbols or [p.symbol for p in state.positions]

    # Loading

    def load(self, force: bool = False) -> PortfolioState:
        """
        Fetch everything, or only prices once a full load has happened.

        Raises the first failure of the fan-out; on failure the previous
        state is left untouched.
        """
        if self._has_loaded and not force:
            return self.refresh_prices()

        generation = self._begin()
        today = self._today()
        fetched = self._data.fetch_all(today)
        base = fetched.settings.base_currency if fetched.settings else self._default_base_currency
        symbols = [s.symbol for s in fetched.stocks] or [p.symbol for p in fetched.positions]

        extras = run_all(
            {
                "latest_prices": lambda: self._data.fetch_latest_prices(symbols),
                "previous_closes": lambda: self._data.fetch_previous_closes(symbols, today),
                "rates": lambda: self._data.fetch_rates_to_base(base),
            }
        )
        state = PortfolioState(
            settings=fetched.settings,
            positions=fetched.positions,
            accounts=fetched.accounts,
            stock_transactions=fetched.stock_transactions,
            cash_transactions=fetched.cash_transactions,
            cash_ledger=fetched.cash_ledger,
            stocks=fetched.stocks,
            snapshot=fetched.snapshot,
            yesterday_snapshot=fetched.yesterday_snapshot,
            latest_prices=extras["latest_prices"],
            previous_closes=extras["previous_closes"],
            rates=extras["rates"].as_dict(),
        )
        if not self._commit(generation, state):
            return self._state

        self._has_loaded = True
        self._last_load = self._clock()
        logger.info(
            "Loaded %d positions, %d accounts, %d prices",
            len(state.positions),
            len(state.accounts),
            len(state.latest_prices),
        )
        return state

    def refresh_prices(self, force: bool = False) -> PortfolioState:
        """Reload latest prices, at most once per refresh interval unless forced."""
        now = self._clock()
        if (
            not force
            and self._last_load is not None
            and (now - self._last_load).total_seconds() < self._price_refresh_interval
        ):
            return self._state

        generation = self._begin()
        prices = self._data.fetch_latest_prices(self._symbols(self._state))
        state = replace(self._state, latest_prices=prices)
        if not self._commit(generation, state, only=["latest_prices"]):
            return self._state

        self._last_load = now
        return state

    # Derived views

    def cash_balances(self) -> CashBalances:
        return compute_cash_balances(self._state.accounts, self._state.cash_ledger, self.rates)

    def position_metrics(self) -> list[PositionMetrics]:
        state = self._state
        return build_position_metrics(
            state.positions,
            state.stocks,
            self.rates,
            state.latest_prices,
            state.previous_closes,
        )

    def positions(
        self,
        sort: HoldingSortOption = HoldingSortOption.TICKER,
        ascending: bool = True,
    ) -> list[PositionMetrics]:
        return sort_positions(self.position_metrics(), sort, ascending)

    def summary(self) -> PortfolioSummary:
        """Headline figures from the current state."""
        state = self._state
        holdings_value = total_holdings_value(self.position_metrics())
        cost_basis = sum((p.total_cost_base for p in state.positions), ZERO)
        cash_flow = today_cash_flow(
            state.cash_transactions,
            self._today(),
            self._tz,
            self._cash_flow_leg_types,
        )
        result = summarize(
            holdings_value,
            cost_basis,
            self.cash_balances().total_base,
            cash_flow,
            state.yesterday_snapshot,
            base_currency=self.base_currency,
        )
        result.as_of = self.last_updated
        return result

    def dividend_income(self, symbol: str) -> Decimal:
        return dividend_income(symbol, self._state.stock_transactions)

    def transaction_count(self, symbol: str) -> int:
        return transaction_count(symbol, self._state.stock_transactions)

    # Transactions

    def builder(self) -> TransactionBuilder:
        """Builder over the current accounts, stocks and rates."""
        return TransactionBuilder(
            self._state.accounts,
            self._state.stocks,
            self.rates,
            allow_zero_net_dividend=self._allow_zero_net_dividend,
        )

    def preview(self, entry: TransactionEntry) -> EntryPreview:
        return self.builder().preview(entry)

    def submit(self, entry: TransactionEntry) -> SubmissionResult:
        """Build, submit and then reload; a failed reload keeps the result."""
        result = self._submitter.submit(self.builder().build(entry))
        self._reload_after_write()
        return result

    def pending_groups(self) -> list[PendingGroup]:
        return self._submitter.pending_groups()

    def reconcile(self) -> ReconciliationReport:
        report = self._submitter.reconcile()
        if report.removed_groups:
            self._reload_after_write()
        return report

    def _reload_after_write(self) -> None:
        try:
            self.load(force=True)
        except RemoteError as exc:
            logger.warning("Reload after write failed, showing previous data: %s", exc)

    # Master data

    def add_cash_account(self, currency: str, display_name: str) -> CashAccount:
        account = self._data.create_cash_account(currency, display_name)
        with self._lock:
            accounts = sorted(self._state.accounts + [account], key=lambda a: a.display_name)
            self._state = replace(self._state, accounts=accounts)
            self._cache.save_state(self._state, only=["accounts"])
        return account

    def archive_cash_account(self, account_id: str) -> None:
        self._data.archive_cash_account(account_id, self._clock())
        with self._lock:
            accounts = [a for a in self._state.accounts if a.id != account_id]
            self._state = replace(self._state, accounts=accounts)
            self._cache.save_state(self._state, only=["accounts"])

    def add_stock(
        self,
        symbol: str,
        name: str,
        market: str,
        currency: str,
        exchange: Optional[str] = None,
    ) -> Stock:
        stock = self._data.create_stock(symbol, name, market, currency, exchange)
        self._replace_stocks(self._data.fetch_stocks())
        return stock

    def update_stock(self, stock_id: str, name: str, exchange: Optional[str] = None) -> None:
        self._data.update_stock(stock_id, name, exchange)
        self._replace_stocks(self._data.fetch_stocks())

    def delete_stock(self, stock_id: str) -> None:
        self._data.delete_stock(stock_id)
        self._replace_stocks([s for s in self._state.stocks if s.id != stock_id])

    def _replace_stocks(self, stocks: list[Stock]) -> None:
        with self._lock:
            self._state = replace(self._state, stocks=stocks)
            self._cache.save_state(self._state, only=["stocks"])
