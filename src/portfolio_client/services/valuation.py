"""Portfolio valuation: pure aggregation over already-fetched state."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping, Optional

import pytz

from portfolio_client.core.money import ZERO, percent_of, round_amount
from portfolio_client.core.timezone import to_local
from portfolio_client.domain.models import (
    CashAccount,
    CashTransaction,
    PortfolioPosition,
    PortfolioSnapshot,
    Stock,
    StockTransaction,
    StockTradeType,
    Market,
    CASH_FLOW_LEG_TYPES,
)
from portfolio_client.domain.views import (
    AccountCashValue,
    CashBalances,
    PositionMetrics,
    PortfolioSummary,
)
from portfolio_client.services.fx_rates import RateTable

# Currency a listing market trades in
_MARKET_CURRENCIES = {
    Market.US.value: "USD",
    Market.HK.value: "HKD",
    Market.CN.value: "CNY",
}


class HoldingSortOption(str, Enum):
    """Sort keys offered on the holdings list."""

    TICKER = "ticker"
    MARKET_VALUE = "market_value"
    DAYS_GAIN = "days_gain"
    DAYS_GAIN_PERCENT = "days_gain_percent"
    TOTAL_GAIN = "total_gain"
    TOTAL_GAIN_PERCENT = "total_gain_percent"


def compute_cash_balances(
    accounts: Iterable[CashAccount],
    cash_transactions: Iterable[CashTransaction],
    rates: RateTable,
) -> CashBalances:
    """
    Native and base-currency balance of every active account.

    The native balance is the sum of the account's legs signed by direction;
    the base value is that balance at the account currency's rate, rounded to
    cents. Archived accounts are skipped. An account whose currency has no
    rate is listed without a base value and left out of the total.
    """
    native: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for tx in cash_transactions:
        native[tx.cash_account_id] += tx.signed_amount

    result = CashBalances()
    total = ZERO
    missing: set[str] = set()

    for account in sorted(accounts, key=lambda a: a.display_name):
        if account.is_archived:
            continue
        balance = native.get(account.id, ZERO)
        rate = rates.get(account.currency)
        base_value = None
        if rate is None:
            missing.add(account.currency.upper())
        else:
            base_value = round_amount(balance * rate)
            total += base_value
        result.accounts.append(
            AccountCashValue(
                account_id=account.id,
                display_name=account.display_name,
                currency=account.currency.upper(),
                native_balance=balance,
                rate=rate,
                base_value=base_value,
            )
        )

    result.total_base = round_amount(total)
    result.missing_currencies = sorted(missing)
    return result


def exchange_rate_for_stock(stock: Stock, rates: RateTable) -> Optional[Decimal]:
    """Rate to base for a stock: its market's currency, else its own currency."""
    currency = _MARKET_CURRENCIES.get((stock.market or "").upper(), stock.currency)
    return rates.get(currency)


def position_metrics(
    position: PortfolioPosition,
    stock: Optional[Stock],
    rate: Optional[Decimal],
    last_price: Optional[Decimal] = None,
    previous_close: Optional[Decimal] = None,
) -> PositionMetrics:
    """Market value, day gain and total gain of one position in base currency."""
    shares = position.total_shares
    if shares == ZERO:
        average_cost_native = ZERO
    elif position.total_cost_native is not None:
        average_cost_native = position.total_cost_native / shares
    else:
        average_cost_native = position.total_cost_base / shares

    metrics = PositionMetrics(
        stock_id=position.stock_id,
        symbol=position.symbol,
        name=stock.name if stock else position.symbol,
        shares=shares,
        cost_base=position.total_cost_base,
        average_cost_native=average_cost_native,
        rate=rate,
        last_price=last_price,
        previous_close=previous_close,
    )
    if rate is None or last_price is None:
        return metrics

    metrics.market_value = last_price * shares * rate
    metrics.total_gain = metrics.market_value - position.total_cost_base
    metrics.total_gain_percent = percent_of(metrics.total_gain, position.total_cost_base)
    if previous_close is not None:
        metrics.days_gain = (last_price - previous_close) * shares * rate
        metrics.days_gain_percent = percent_of(last_price - previous_close, previous_close)
    return metrics


def build_position_metrics(
    positions: Iterable[PortfolioPosition],
    stocks: Iterable[Stock],
    rates: RateTable,
    latest_prices: Mapping[str, Decimal],
    previous_closes: Mapping[str, Decimal],
) -> list[PositionMetrics]:
    """Metrics for every position; unknown stocks fall back to the base currency."""
    stocks_by_id = {s.id: s for s in stocks}
    result = []
    for position in positions:
        stock = stocks_by_id.get(position.stock_id)
        rate = exchange_rate_for_stock(stock, rates) if stock else rates.get(rates.base)
        result.append(
            position_metrics(
                position,
                stock,
                rate,
                last_price=latest_prices.get(position.symbol),
                previous_close=previous_closes.get(position.symbol),
            )
        )
    return result


def total_holdings_value(metrics: Iterable[PositionMetrics]) -> Decimal:
    """Sum of market values, using cost basis for positions without a live price."""
    return sum((m.value_base for m in metrics), ZERO)


def today_cash_flow(
    cash_transactions: Iterable[CashTransaction],
    today: date,
    tz: pytz.BaseTzInfo,
    leg_types: frozenset = CASH_FLOW_LEG_TYPES,
) -> Decimal:
    """Signed base amount of today's legs among ``leg_types``."""
    total = ZERO
    for tx in cash_transactions:
        if tx.leg_type not in leg_types:
            continue
        if to_local(tx.occurred_at, tz).date() != today:
            continue
        total += tx.base_amount
    return total


def summarize(
    holdings_value: Decimal,
    total_cost_basis: Decimal,
    cash_balance: Decimal,
    cash_flow: Decimal,
    previous_snapshot: Optional[PortfolioSnapshot],
    base_currency: str = "USD",
) -> PortfolioSummary:
    """
    Day change and gain/loss figures.

    The day change is measured against the previous snapshot plus today's
    cash flow, so deposits and withdrawals do not count as performance.
    Without a previous snapshot the day change is zero.
    """
    current_total = holdings_value + cash_balance

    if previous_snapshot is not None:
        baseline = previous_snapshot.total_value + cash_flow
        change_value = current_total - baseline
        change_ratio = change_value / baseline if baseline != ZERO else ZERO
    else:
        change_value = ZERO
        change_ratio = ZERO

    gain_loss = holdings_value - total_cost_basis
    gain_loss_ratio = gain_loss / total_cost_basis if total_cost_basis != ZERO else ZERO

    return PortfolioSummary(
        total_holdings_value=holdings_value,
        total_cost_basis=total_cost_basis,
        cash_balance=cash_balance,
        current_total=current_total,
        today_cash_flow=cash_flow,
        today_change_value=change_value,
        today_change_ratio=change_ratio,
        gain_loss_value=gain_loss,
        gain_loss_ratio=gain_loss_ratio,
        base_currency=base_currency,
        has_previous_snapshot=previous_snapshot is not None,
    )


def dividend_income(symbol: str, stock_transactions: Iterable[StockTransaction]) -> Decimal:
    """Total base-currency dividends received for ``symbol``."""
    return sum(
        (
            abs(tx.base_gross_amount or ZERO)
            for tx in stock_transactions
            if tx.symbol == symbol and tx.trade_type == StockTradeType.DIVIDEND
        ),
        ZERO,
    )


def transaction_count(symbol: str, stock_transactions: Iterable[StockTransaction]) -> int:
    return sum(1 for tx in stock_transactions if tx.symbol == symbol)


def sort_positions(
    metrics: list[PositionMetrics],
    option: HoldingSortOption = HoldingSortOption.MARKET_VALUE,
    ascending: bool = False,
) -> list[PositionMetrics]:
    """Order holdings by one of the list's sort keys; missing values count as zero."""
    option = HoldingSortOption(option)
    if option == HoldingSortOption.TICKER:
        return sorted(metrics, key=lambda m: m.symbol, reverse=not ascending)

    def _key(m: PositionMetrics) -> Decimal:
        if option == HoldingSortOption.MARKET_VALUE:
            return m.value_base
        value = getattr(m, option.value)
        return value if value is not None else ZERO

    return sorted(metrics, key=_key, reverse=not ascending)
