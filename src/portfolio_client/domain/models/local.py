"""Offline ledger models.

The offline ledger has no group/leg split: each transaction mutates a single
holding through the moving-average update rule.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from portfolio_client.domain.models.enums import LocalTransactionType, CapitalType, Market


@dataclass
class Ticker:
    """A locally tracked instrument."""

    ticker_id: str
    code: str
    name: str
    market: Market = Market.US
    currency: str = "USD"

    def __post_init__(self):
        if isinstance(self.market, str):
            self.market = Market(self.market)


@dataclass
class LocalTransaction:
    """A trade or dividend recorded in the offline ledger."""

    txn_id: str
    ticker_id: str
    txn_type: LocalTransactionType
    txn_date: datetime
    quantity: Decimal
    price: Decimal
    note: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.txn_type, str):
            self.txn_type = LocalTransactionType(self.txn_type)

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.price

    @property
    def cash_impact(self) -> Decimal:
        """Buys consume cash; sells and dividends add it."""
        if self.txn_type == LocalTransactionType.BUY:
            return -self.amount
        return self.amount


@dataclass
class Holding:
    """Quantity and moving-average cost for one ticker."""

    ticker_id: str
    quantity: Decimal = field(default_factory=lambda: Decimal("0"))
    average_cost: Decimal = field(default_factory=lambda: Decimal("0"))
    total_cost_basis: Decimal = field(default_factory=lambda: Decimal("0"))


@dataclass
class CapitalOperation:
    """A movement of capital into or out of the offline portfolio."""

    operation_id: str
    capital_type: CapitalType
    amount: Decimal
    operation_date: datetime
    note: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.capital_type, str):
            self.capital_type = CapitalType(self.capital_type)


@dataclass
class CapitalSummary:
    """Capital totals by type."""

    initial_deposit: Decimal = field(default_factory=lambda: Decimal("0"))
    deposits: Decimal = field(default_factory=lambda: Decimal("0"))
    withdrawals: Decimal = field(default_factory=lambda: Decimal("0"))
    interest: Decimal = field(default_factory=lambda: Decimal("0"))

    @property
    def current_cash_balance(self) -> Decimal:
        return self.initial_deposit + self.deposits - self.withdrawals + self.interest


@dataclass
class PendingGroup:
    """A transaction group whose legs have not all been created yet."""

    group_id: str
    created_at: datetime
    description: Optional[str] = None
