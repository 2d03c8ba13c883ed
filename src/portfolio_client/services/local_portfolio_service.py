"""Offline portfolio service: tickers, trades, capital and derived holdings."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from portfolio_client.core.exceptions import ValidationError, NotFoundError
from portfolio_client.core.money import ZERO, normalize_currency
from portfolio_client.core.timezone import now_local, to_local
from portfolio_client.domain.models import (
    Ticker,
    LocalTransaction,
    LocalTransactionType,
    Holding,
    CapitalOperation,
    CapitalType,
    CapitalSummary,
    Market,
)
from portfolio_client.repositories.protocols import (
    TickerRepository,
    LocalTransactionRepository,
    CapitalRepository,
    HoldingRepository,
)
from portfolio_client.services.holdings_ledger import (
    rebuild_holdings,
    total_cash_impact,
)


@dataclass
class LocalTransactionCreate:
    """Input data for recording an offline transaction."""

    ticker_id: str
    txn_type: LocalTransactionType
    quantity: Decimal
    price: Decimal
    txn_date: Optional[datetime] = None
    note: Optional[str] = None


def _naive_local(dt: datetime) -> datetime:
    """Local wall-clock time without tzinfo, as stored in SQLite."""
    if dt.tzinfo is None:
        return dt
    return to_local(dt).replace(tzinfo=None)


class LocalPortfolioService:
    """
    Service for the offline (non-cloud) portfolio.

    Transactions are the source of truth; holdings are derived. Adding a
    transaction replays that ticker's stored history; deleting one replays
    every ticker. Both read the same stored rows, so a holding does not
    depend on the order in which its transactions were entered.
    """

    def __init__(
        self,
        ticker_repo: TickerRepository,
        transaction_repo: LocalTransactionRepository,
        capital_repo: CapitalRepository,
        holding_repo: HoldingRepository,
    ):
        self._ticker_repo = ticker_repo
        self._transaction_repo = transaction_repo
        self._capital_repo = capital_repo
        self._holding_repo = holding_repo

    # Tickers

    def add_ticker(
        self,
        code: str,
        name: str,
        market: Market = Market.US,
        currency: str = "USD",
    ) -> Ticker:
        """Create a ticker. Codes are unique ignoring case."""
        code = (code or "").strip().upper()
        name = (name or "").strip()
        if not code:
            raise ValidationError("Ticker code is required", field="code")
        if not name:
            raise ValidationError("Ticker name is required", field="name")
        if self._ticker_repo.get_by_code(code):
            raise ValidationError(f"Ticker '{code}' already exists", field="code")

        ticker = Ticker(
            ticker_id=str(uuid.uuid4()),
            code=code,
            name=name,
            market=Market(market),
            currency=normalize_currency(currency),
        )
        return self._ticker_repo.create(ticker)

    def update_ticker(
        self,
        ticker_id: str,
        name: Optional[str] = None,
        market: Optional[Market] = None,
        currency: Optional[str] = None,
    ) -> Ticker:
        """Edit a ticker's descriptive fields."""
        ticker = self.get_ticker(ticker_id)
        if name is not None:
            if not name.strip():
                raise ValidationError("Ticker name is required", field="name")
            ticker.name = name.strip()
        if market is not None:
            ticker.market = Market(market)
        if currency is not None:
            ticker.currency = normalize_currency(currency)
        return self._ticker_repo.update(ticker)

    def get_ticker(self, ticker_id: str) -> Ticker:
        ticker = self._ticker_repo.get_by_id(ticker_id)
        if not ticker:
            raise NotFoundError("Ticker", ticker_id)
        return ticker

    def list_tickers(self) -> list[Ticker]:
        return self._ticker_repo.list_all()

    def delete_ticker(self, ticker_id: str) -> None:
        """Delete a ticker together with its transactions and holding."""
        self.get_ticker(ticker_id)
        self._transaction_repo.delete_by_ticker(ticker_id)
        self._holding_repo.delete(ticker_id)
        self._ticker_repo.delete(ticker_id)

    # Transactions

    def add_transaction(self, data: LocalTransactionCreate) -> LocalTransaction:
        """Record a trade or dividend and update the derived holding."""
        self.get_ticker(data.ticker_id)
        if data.quantity is None or data.quantity <= ZERO:
            raise ValidationError("Quantity must be positive", field="quantity")
        if data.price is None or data.price <= ZERO:
            raise ValidationError("Price must be positive", field="price")

        txn_date = _naive_local(data.txn_date or now_local())

        txn = self._transaction_repo.create(
            LocalTransaction(
                txn_id=str(uuid.uuid4()),
                ticker_id=data.ticker_id,
                txn_type=LocalTransactionType(data.txn_type),
                txn_date=txn_date,
                quantity=data.quantity,
                price=data.price,
                note=data.note.strip() if data.note and data.note.strip() else None,
            )
        )

        self._rebuild_ticker(data.ticker_id)
        return txn

    def delete_transaction(self, txn_id: str) -> None:
        """Delete a transaction and replay the remaining history."""
        if not self._transaction_repo.get_by_id(txn_id):
            raise NotFoundError("Transaction", txn_id)
        self._transaction_repo.delete(txn_id)
        self.rebuild()

    def list_transactions(self, ticker_id: Optional[str] = None) -> list[LocalTransaction]:
        return self._transaction_repo.list_all(ticker_id=ticker_id)

    def rebuild(self) -> list[Holding]:
        """Discard all holdings and rebuild them from the full history."""
        holdings = rebuild_holdings(self._transaction_repo.list_all())
        self._holding_repo.replace_all(list(holdings.values()))
        return self._holding_repo.list_all()

    def get_holdings(self) -> list[Holding]:
        return self._holding_repo.list_all()

    def _rebuild_ticker(self, ticker_id: str) -> None:
        """Replay one ticker's stored history into its holding."""
        history = self._transaction_repo.list_all(ticker_id=ticker_id)
        holding = rebuild_holdings(history).get(ticker_id) or Holding(ticker_id=ticker_id)
        self._holding_repo.upsert(holding)

    # Capital

    def add_capital(
        self,
        capital_type: CapitalType,
        amount: Decimal,
        operation_date: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> CapitalOperation:
        """Record a capital movement."""
        if amount is None or amount <= ZERO:
            raise ValidationError("Amount must be positive", field="amount")
        operation = CapitalOperation(
            operation_id=str(uuid.uuid4()),
            capital_type=CapitalType(capital_type),
            amount=amount,
            operation_date=_naive_local(operation_date or now_local()),
            note=note,
        )
        return self._capital_repo.create(operation)

    def delete_capital(self, operation_id: str) -> None:
        self._capital_repo.delete(operation_id)

    def list_capital(self) -> list[CapitalOperation]:
        return self._capital_repo.list_all()

    def capital_summary(self) -> CapitalSummary:
        """Totals of capital movements by type."""
        summary = CapitalSummary()
        for op in self._capital_repo.list_all():
            if op.capital_type == CapitalType.INITIAL_DEPOSIT:
                summary.initial_deposit += op.amount
            elif op.capital_type == CapitalType.DEPOSIT:
                summary.deposits += op.amount
            elif op.capital_type == CapitalType.WITHDRAWAL:
                summary.withdrawals += op.amount
            elif op.capital_type == CapitalType.INTEREST:
                summary.interest += op.amount
        return summary

    def cash_balance(self) -> Decimal:
        """Capital balance plus the cash effect of every trade and dividend."""
        transactions = self._transaction_repo.list_all()
        return self.capital_summary().current_cash_balance + total_cash_impact(transactions)
