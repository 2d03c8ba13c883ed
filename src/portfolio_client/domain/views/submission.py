"""View models for transaction entry and submission."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from portfolio_client.domain.models import TransactionGroup, CashTransaction, StockTransaction


@dataclass
class EntryPreview:
    """Computed amounts shown before a transaction is confirmed."""

    currency: str
    gross_amount: Decimal
    fees: Decimal
    net_cash: Decimal
    base_amount: Decimal
    target_currency: Optional[str] = None
    target_amount: Optional[Decimal] = None


@dataclass
class SubmissionResult:
    """Rows created for one submitted transaction."""

    group: TransactionGroup
    cash_transactions: list[CashTransaction] = field(default_factory=list)
    stock_transaction: Optional[StockTransaction] = None


@dataclass
class ReconciliationReport:
    """Outcome of sweeping groups left pending by failed submissions."""

    removed_groups: list[str] = field(default_factory=list)
    removed_legs: int = 0
    failed_groups: dict[str, str] = field(default_factory=dict)
