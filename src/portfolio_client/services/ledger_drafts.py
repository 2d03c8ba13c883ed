"""Unsaved ledger rows produced by the transaction builder."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from portfolio_client.core.money import ZERO
from portfolio_client.core.timezone import format_timestamp
from portfolio_client.domain.models import (
    GroupType,
    TransactionStatus,
    CashLegType,
    CashDirection,
    StockTradeType,
)


def _json_value(value: Any) -> Any:
    """Encode a field for the backend: decimals as strings to keep precision."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return format_timestamp(value)
    return value


def _payload(**fields: Any) -> dict[str, Any]:
    return {key: _json_value(value) for key, value in fields.items() if value is not None}


@dataclass
class GroupDraft:
    """Transaction group about to be created."""

    group_type: GroupType
    status: TransactionStatus
    occurred_at: datetime
    settled_at: Optional[datetime] = None
    notes: Optional[str] = None
    external_ref: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        return _payload(
            group_type=self.group_type,
            status=self.status,
            occurred_at=self.occurred_at,
            settled_at=self.settled_at,
            notes=self.notes,
            external_ref=self.external_ref,
        )


@dataclass
class StockLegDraft:
    """Stock ledger leg about to be created."""

    stock_id: str
    symbol: str
    trade_type: StockTradeType
    trade_date: datetime
    quantity: Decimal
    price_per_share: Decimal
    gross_amount: Decimal
    fees: Decimal
    currency: str
    fx_rate: Decimal
    base_gross_amount: Decimal
    base_fees: Decimal
    status: TransactionStatus
    settlement_date: Optional[datetime] = None
    notes: Optional[str] = None

    def to_payload(self, group_id: str) -> dict[str, Any]:
        return _payload(
            group_id=group_id,
            stock_id=self.stock_id,
            symbol=self.symbol,
            trade_type=self.trade_type,
            trade_date=self.trade_date,
            settlement_date=self.settlement_date,
            quantity=self.quantity,
            price_per_share=self.price_per_share,
            gross_amount=self.gross_amount,
            fees=self.fees,
            currency=self.currency,
            fx_rate=self.fx_rate,
            base_gross_amount=self.base_gross_amount,
            base_fees=self.base_fees,
            status=self.status,
            notes=self.notes,
        )


@dataclass
class CashLegDraft:
    """
    Cash ledger leg about to be created.

    ``amount`` is non-negative; ``base_amount`` carries the sign of
    ``direction``. When ``settles_stock_leg`` is set the leg is linked to the
    stock leg created in the same submission.
    """

    cash_account_id: str
    leg_type: CashLegType
    direction: CashDirection
    amount: Decimal
    currency: str
    fx_rate: Decimal
    base_amount: Decimal
    occurred_at: datetime
    settled_at: Optional[datetime] = None
    notes: Optional[str] = None
    settles_stock_leg: bool = False

    def to_payload(
        self,
        group_id: str,
        related_stock_transaction_id: Optional[str] = None,
    ) -> dict[str, Any]:
        return _payload(
            group_id=group_id,
            cash_account_id=self.cash_account_id,
            leg_type=self.leg_type,
            direction=self.direction,
            amount=self.amount,
            currency=self.currency,
            fx_rate=self.fx_rate,
            base_amount=self.base_amount,
            occurred_at=self.occurred_at,
            settled_at=self.settled_at,
            related_stock_transaction_id=related_stock_transaction_id,
            notes=self.notes,
        )


@dataclass
class LedgerPlan:
    """One group plus the legs that make up a single economic event."""

    group: GroupDraft
    cash_legs: list[CashLegDraft] = field(default_factory=list)
    stock_leg: Optional[StockLegDraft] = None

    @property
    def base_cash_total(self) -> Decimal:
        """Net base-currency cash movement across all cash legs."""
        return sum((leg.base_amount for leg in self.cash_legs), ZERO)
