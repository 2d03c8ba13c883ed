"""Pydantic schemas for the offline ledger endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from portfolio_client.domain.models import LocalTransactionType, CapitalType, Market


class TickerCreate(BaseModel):
    """Request schema for creating a ticker."""

    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=255)
    market: Market = Market.US
    currency: str = Field(default="USD", min_length=3, max_length=3)


class TickerUpdate(BaseModel):
    """Request schema for editing a ticker; omitted fields are unchanged."""

    name: Optional[str] = Field(default=None, max_length=255)
    market: Optional[Market] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class TickerResponse(BaseModel):
    model_config = {"from_attributes": True}

    ticker_id: str
    code: str
    name: str
    market: Market
    currency: str


class LocalTransactionRequest(BaseModel):
    """Request schema for recording an offline trade or dividend."""

    ticker_id: str
    txn_type: LocalTransactionType
    quantity: Decimal = Field(..., gt=0)
    price: Decimal = Field(..., gt=0)
    txn_date: Optional[datetime] = None
    note: Optional[str] = Field(default=None, max_length=1000)


class LocalTransactionResponse(BaseModel):
    model_config = {"from_attributes": True}

    txn_id: str
    ticker_id: str
    txn_type: LocalTransactionType
    txn_date: datetime
    quantity: Decimal
    price: Decimal
    note: Optional[str] = None


class HoldingResponse(BaseModel):
    model_config = {"from_attributes": True}

    ticker_id: str
    quantity: Decimal
    average_cost: Decimal
    total_cost_basis: Decimal


class CapitalRequest(BaseModel):
    """Request schema for recording a capital movement."""

    capital_type: CapitalType
    amount: Decimal = Field(..., gt=0)
    operation_date: Optional[datetime] = None
    note: Optional[str] = Field(default=None, max_length=1000)


class CapitalResponse(BaseModel):
    model_config = {"from_attributes": True}

    operation_id: str
    capital_type: CapitalType
    amount: Decimal
    operation_date: datetime
    note: Optional[str] = None


class CapitalSummaryResponse(BaseModel):
    """Capital totals plus the resulting cash balance."""

    initial_deposit: Decimal
    deposits: Decimal
    withdrawals: Decimal
    interest: Decimal
    capital_balance: Decimal
    cash_balance: Decimal
