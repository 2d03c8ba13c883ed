"""Pydantic schemas for transaction entry endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from portfolio_client.domain.models import (
    TransactionGroup,
    CashTransaction,
    StockTransaction,
    TransactionStatus,
)
from portfolio_client.services.transaction_builder import TransactionEntry, TransactionKind


class TransactionEntryRequest(BaseModel):
    """
    Raw entry form values.

    Numbers are sent as the text the user typed; the builder parses and
    validates them.
    """

    kind: TransactionKind
    occurred_at: datetime
    account_id: Optional[str] = None
    target_account_id: Optional[str] = None
    stock_id: Optional[str] = None
    amount: str = ""
    shares: str = ""
    price: str = ""
    fees: str = ""
    dividend_per_share: str = ""
    status: TransactionStatus = TransactionStatus.SETTLED
    notes: Optional[str] = Field(default=None, max_length=1000)
    external_ref: Optional[str] = Field(default=None, max_length=255)

    def to_entry(self) -> TransactionEntry:
        return TransactionEntry(**self.model_dump())


class EntryPreviewResponse(BaseModel):
    """Amounts shown before confirming."""

    model_config = {"from_attributes": True}

    currency: str
    gross_amount: Decimal
    fees: Decimal
    net_cash: Decimal
    base_amount: Decimal
    target_currency: Optional[str] = None
    target_amount: Optional[Decimal] = None


class SubmissionResponse(BaseModel):
    """Rows created by a submission."""

    model_config = {"from_attributes": True}

    group: TransactionGroup
    cash_transactions: list[CashTransaction]
    stock_transaction: Optional[StockTransaction] = None


class PendingGroupResponse(BaseModel):
    """A group left pending by a failed submission."""

    model_config = {"from_attributes": True}

    group_id: str
    created_at: datetime
    description: Optional[str] = None


class ReconciliationResponse(BaseModel):
    """Outcome of a reconciliation sweep."""

    model_config = {"from_attributes": True}

    removed_groups: list[str]
    removed_legs: int
    failed_groups: dict[str, str]
