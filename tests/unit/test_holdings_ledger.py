"""
Unit tests for the average-cost holdings ledger.

Tests cover:
- Buy averaging
- Sell clamping and unchanged average
- Dividends leaving holdings untouched
- Full replay in date order
- Cash impact of trades
"""

from datetime import datetime
from decimal import Decimal

from portfolio_client.domain.models import Holding, LocalTransaction, LocalTransactionType
from portfolio_client.services.holdings_ledger import (
    apply_transaction,
    rebuild_holdings,
    total_cash_impact,
)

from tests.conftest import assert_decimal_equal


def _txn(
    txn_id: str,
    txn_type: LocalTransactionType,
    quantity: str,
    price: str,
    day: int,
    ticker_id: str = "t-aapl",
) -> LocalTransaction:
    return LocalTransaction(
        txn_id=txn_id,
        ticker_id=ticker_id,
        txn_type=txn_type,
        txn_date=datetime(2024, 6, day, 10, 0),
        quantity=Decimal(quantity),
        price=Decimal(price),
    )


# =============================================================================
# APPLY TRANSACTION TESTS
# =============================================================================


class TestApplyTransaction:
    """Tests for the moving-average update rule."""

    def test_buy_into_empty_holding(self):
        holding = apply_transaction(
            Holding(ticker_id="t-aapl"),
            _txn("1", LocalTransactionType.BUY, "10", "100", 1),
        )

        assert holding.quantity == Decimal("10")
        assert holding.average_cost == Decimal("100")
        assert holding.total_cost_basis == Decimal("1000")

    def test_second_buy_averages_cost(self):
        """
        GIVEN 10 shares at 100
        WHEN I buy 10 more at 120
        THEN the average is 110 and cost basis 2,200
        """
        holding = Holding(
            ticker_id="t-aapl",
            quantity=Decimal("10"),
            average_cost=Decimal("100"),
            total_cost_basis=Decimal("1000"),
        )

        result = apply_transaction(holding, _txn("2", LocalTransactionType.BUY, "10", "120", 2))

        assert result.quantity == Decimal("20")
        assert_decimal_equal(result.average_cost, Decimal("110"))
        assert result.total_cost_basis == Decimal("2200")

    def test_sell_keeps_average(self):
        holding = Holding(
            ticker_id="t-aapl",
            quantity=Decimal("20"),
            average_cost=Decimal("110"),
            total_cost_basis=Decimal("2200"),
        )

        result = apply_transaction(holding, _txn("3", LocalTransactionType.SELL, "5", "150", 3))

        assert result.quantity == Decimal("15")
        assert result.average_cost == Decimal("110")
        assert result.total_cost_basis == Decimal("1650")

    def test_oversell_clamps_to_zero(self):
        """
        GIVEN 5 shares
        WHEN I sell 8
        THEN quantity is clamped at 0 and cost basis is 0
        """
        holding = Holding(
            ticker_id="t-aapl",
            quantity=Decimal("5"),
            average_cost=Decimal("100"),
            total_cost_basis=Decimal("500"),
        )

        result = apply_transaction(holding, _txn("4", LocalTransactionType.SELL, "8", "90", 4))

        assert result.quantity == Decimal("0")
        assert result.total_cost_basis == Decimal("0")

    def test_dividend_has_no_effect(self):
        holding = Holding(
            ticker_id="t-aapl",
            quantity=Decimal("5"),
            average_cost=Decimal("100"),
            total_cost_basis=Decimal("500"),
        )

        result = apply_transaction(holding, _txn("5", LocalTransactionType.DIVIDEND, "5", "1", 5))

        assert result == holding
        assert result is not holding


# =============================================================================
# REBUILD TESTS
# =============================================================================


class TestRebuildHoldings:
    """Tests for full replay."""

    def test_replay_sorts_by_date(self):
        """
        GIVEN a sell recorded before the buy it depends on (out of order)
        WHEN holdings are rebuilt
        THEN the buy is applied first and the sell reduces it
        """
        transactions = [
            _txn("s", LocalTransactionType.SELL, "4", "130", 10),
            _txn("b", LocalTransactionType.BUY, "10", "100", 1),
        ]

        holdings = rebuild_holdings(transactions)

        assert holdings["t-aapl"].quantity == Decimal("6")
        assert holdings["t-aapl"].total_cost_basis == Decimal("600")

    def test_replay_keeps_tickers_separate(self):
        transactions = [
            _txn("1", LocalTransactionType.BUY, "10", "100", 1, ticker_id="t-aapl"),
            _txn("2", LocalTransactionType.BUY, "3", "50", 2, ticker_id="t-msft"),
        ]

        holdings = rebuild_holdings(transactions)

        assert set(holdings) == {"t-aapl", "t-msft"}
        assert holdings["t-msft"].total_cost_basis == Decimal("150")

    def test_empty_history(self):
        assert rebuild_holdings([]) == {}


class TestTotalCashImpact:
    def test_buys_consume_and_sells_and_dividends_add(self):
        transactions = [
            _txn("1", LocalTransactionType.BUY, "10", "100", 1),
            _txn("2", LocalTransactionType.SELL, "2", "120", 2),
            _txn("3", LocalTransactionType.DIVIDEND, "8", "0.5", 3),
        ]

        assert total_cash_impact(transactions) == Decimal("-756")
