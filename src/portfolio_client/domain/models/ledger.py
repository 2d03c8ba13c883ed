"""Backend-owned ledger records.

These mirror the backend's JSON rows (snake_case field names) and are
decoded with pydantic so that a shape mismatch fails loudly instead of
being defaulted.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from portfolio_client.core.timezone import parse_timestamp
from portfolio_client.domain.models.enums import (
    GroupType,
    TransactionStatus,
    CashLegType,
    CashDirection,
    StockTradeType,
)


class BackendRecord(BaseModel):
    """Base class for rows decoded from the backend."""

    model_config = {"extra": "ignore", "populate_by_name": True}


def _coerce_date(value):
    """Accept ``yyyy-MM-dd`` strings as well as full timestamps."""
    if isinstance(value, str) and len(value) > 10:
        return parse_timestamp(value).date()
    return value


class Stock(BackendRecord):
    """A tradable instrument from the stocks master list."""

    id: str
    symbol: str
    name: str
    exchange: Optional[str] = None
    currency: str
    market: Optional[str] = None


class CashAccount(BackendRecord):
    """A single-currency cash account."""

    id: str
    user_id: Optional[str] = None
    currency: str
    display_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None


class TransactionGroup(BackendRecord):
    """Parent record correlating the legs of one economic event."""

    id: str
    user_id: Optional[str] = None
    group_type: GroupType
    status: TransactionStatus
    occurred_at: datetime
    settled_at: Optional[datetime] = None
    notes: Optional[str] = None
    external_ref: Optional[str] = None
    created_at: Optional[datetime] = None


class CashTransaction(BackendRecord):
    """
    Cash ledger leg.

    ``amount`` is never negative; the sign lives in ``direction`` and is
    baked into ``base_amount``.
    """

    id: str
    user_id: Optional[str] = None
    group_id: str
    cash_account_id: str
    leg_type: CashLegType
    direction: CashDirection
    amount: Decimal
    currency: str
    fx_rate: Optional[Decimal] = None
    base_amount: Decimal
    occurred_at: datetime
    settled_at: Optional[datetime] = None
    related_stock_transaction_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def signed_amount(self) -> Decimal:
        """Native amount signed by direction."""
        return self.amount if self.direction == CashDirection.INFLOW else -self.amount


class StockTransaction(BackendRecord):
    """Stock ledger leg."""

    id: str
    user_id: Optional[str] = None
    group_id: str
    stock_id: str
    symbol: str
    trade_type: StockTradeType
    trade_date: datetime
    settlement_date: Optional[datetime] = None
    quantity: Decimal
    price_per_share: Decimal
    gross_amount: Decimal
    fees: Decimal = Decimal("0")
    currency: str
    fx_rate: Optional[Decimal] = None
    base_gross_amount: Optional[Decimal] = None
    base_fees: Optional[Decimal] = None
    average_cost_snapshot: Optional[Decimal] = None
    total_shares_snapshot: Optional[Decimal] = None
    total_cost_base_snapshot: Optional[Decimal] = None
    realized_pl_base: Optional[Decimal] = None
    linked_cash_transaction_id: Optional[str] = None
    status: TransactionStatus = TransactionStatus.SETTLED
    notes: Optional[str] = None


class PortfolioPosition(BackendRecord):
    """Server-computed position for one stock."""

    id: Optional[str] = None
    user_id: Optional[str] = None
    stock_id: str
    symbol: str
    total_shares: Decimal
    total_cost_base: Decimal
    average_cost_base: Optional[Decimal] = None
    total_cost_native: Optional[Decimal] = None
    last_transaction_at: Optional[datetime] = None


class PortfolioSettings(BackendRecord):
    """Per-user portfolio settings."""

    user_id: Optional[str] = None
    base_currency: str = "USD"
    base_currency_set_at: Optional[datetime] = None


class HistoricalPrice(BackendRecord):
    """A daily price point."""

    id: Optional[str] = None
    symbol: str
    price: Decimal
    date: date
    price_type: Optional[str] = None

    normalize_date = field_validator("date", mode="before")(_coerce_date)


class PortfolioSnapshot(BackendRecord):
    """Point-in-time portfolio rollup used as the day-change baseline."""

    id: Optional[str] = None
    user_id: Optional[str] = None
    snapshot_date: date
    total_value: Decimal
    total_cost_basis: Decimal = Decimal("0")
    total_gain_loss: Decimal = Decimal("0")
    total_return_percent: Decimal = Decimal("0")
    currency: str = "USD"
    total_shares: Optional[Decimal] = None
    nav_per_share: Optional[Decimal] = None

    normalize_date = field_validator("snapshot_date", mode="before")(_coerce_date)


class CurrencyRate(BackendRecord):
    """One observed rate between two currencies."""

    id: Optional[str] = None
    from_currency: str
    to_currency: str
    rate: Decimal
    date: datetime

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value):
        if isinstance(value, str):
            return parse_timestamp(value)
        return value


class HistoricalPortfolioSnapshot(BackendRecord):
    """Daily NAV history row used by the analysis screen."""

    id: str
    user_id: Optional[str] = None
    snapshot_date: date
    total_value: Decimal
    principle: Decimal
    total_shares: Optional[Decimal] = None
    nav_per_share: Optional[Decimal] = None
    currency: Optional[str] = None

    normalize_date = field_validator("snapshot_date", mode="before")(_coerce_date)

    @property
    def total_cost_basis(self) -> Decimal:
        return self.principle

    @property
    def gain_loss(self) -> Decimal:
        return self.total_value - self.principle

    @property
    def return_percent(self) -> Decimal:
        if self.principle > 0:
            return (self.total_value - self.principle) / self.principle * 100
        return Decimal("0")


class BenchmarkSnapshot(BackendRecord):
    """Daily index level for a benchmark."""

    id: str
    index_symbol: str
    snapshot_date: date
    price: Decimal

    normalize_date = field_validator("snapshot_date", mode="before")(_coerce_date)
