"""View models for portfolio valuation outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class AccountCashValue:
    """Native and base-currency balance of one cash account."""

    account_id: str
    display_name: str
    currency: str
    native_balance: Decimal
    rate: Optional[Decimal] = None
    base_value: Optional[Decimal] = None


@dataclass
class CashBalances:
    """All active account balances and their base-currency total."""

    accounts: list[AccountCashValue] = field(default_factory=list)
    total_base: Decimal = field(default_factory=lambda: Decimal("0"))
    missing_currencies: list[str] = field(default_factory=list)


@dataclass
class PositionMetrics:
    """Display metrics for one position."""

    stock_id: str
    symbol: str
    name: str
    shares: Decimal
    cost_base: Decimal
    average_cost_native: Decimal
    rate: Optional[Decimal] = None
    last_price: Optional[Decimal] = None
    previous_close: Optional[Decimal] = None
    market_value: Optional[Decimal] = None
    days_gain: Optional[Decimal] = None
    days_gain_percent: Optional[Decimal] = None
    total_gain: Optional[Decimal] = None
    total_gain_percent: Optional[Decimal] = None

    @property
    def value_base(self) -> Decimal:
        """Market value when priced, otherwise cost basis."""
        return self.market_value if self.market_value is not None else self.cost_base


@dataclass
class PortfolioSummary:
    """
    Headline numbers for the dashboard.

    Ratios are fractions (0.0286 is 2.86%).
    """

    total_holdings_value: Decimal
    total_cost_basis: Decimal
    cash_balance: Decimal
    current_total: Decimal
    today_cash_flow: Decimal
    today_change_value: Decimal
    today_change_ratio: Decimal
    gain_loss_value: Decimal
    gain_loss_ratio: Decimal
    base_currency: str = "USD"
    has_previous_snapshot: bool = False
    as_of: Optional[datetime] = None
