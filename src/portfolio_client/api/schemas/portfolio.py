"""Pydantic schemas for portfolio endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class AccountCashResponse(BaseModel):
    """Balance of one cash account."""

    model_config = {"from_attributes": True}

    account_id: str
    display_name: str
    currency: str
    native_balance: Decimal
    rate: Optional[Decimal] = None
    base_value: Optional[Decimal] = None


class CashBalancesResponse(BaseModel):
    """All active account balances."""

    model_config = {"from_attributes": True}

    accounts: list[AccountCashResponse]
    total_base: Decimal
    missing_currencies: list[str]


class PositionResponse(BaseModel):
    """Response schema for a single position."""

    model_config = {"from_attributes": True}

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


class PositionDetailResponse(PositionResponse):
    """Position plus its dividend income and trade count."""

    dividend_income: Decimal
    transaction_count: int


class SummaryResponse(BaseModel):
    """Headline numbers for the dashboard."""

    model_config = {"from_attributes": True}

    total_holdings_value: Decimal
    total_cost_basis: Decimal
    cash_balance: Decimal
    current_total: Decimal
    today_cash_flow: Decimal
    today_change_value: Decimal
    today_change_ratio: Decimal
    gain_loss_value: Decimal
    gain_loss_ratio: Decimal
    base_currency: str
    has_previous_snapshot: bool
    as_of: Optional[datetime] = None


class LoadResponse(BaseModel):
    """Counts of what a load brought in."""

    positions: int
    accounts: int
    prices: int
    last_updated: Optional[datetime] = None


class CashAccountCreate(BaseModel):
    """Request schema for creating a cash account."""

    currency: str = Field(..., min_length=3, max_length=3)
    display_name: str = Field(..., min_length=1, max_length=255)


class StockCreate(BaseModel):
    """Request schema for adding a stock to the master list."""

    symbol: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=255)
    market: str = Field(default="US", min_length=1, max_length=10)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    exchange: Optional[str] = None


class StockUpdate(BaseModel):
    """Request schema for editing a stock."""

    name: str = Field(..., min_length=1, max_length=255)
    exchange: Optional[str] = None
