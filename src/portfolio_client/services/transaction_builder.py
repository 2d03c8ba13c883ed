"""Transaction construction engine.

Turns a typed entry form into the exact ledger rows to submit: one group,
one or two cash legs and optionally one stock leg, with amounts rounded and
converted to the base currency.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from portfolio_client.core.exceptions import ValidationError, FxRateUnavailableError
from portfolio_client.core.money import (
    ZERO,
    parse_decimal,
    round_amount,
    round_base,
    round_price,
    round_quantity,
)
from portfolio_client.domain.models import (
    CashAccount,
    Stock,
    GroupType,
    TransactionStatus,
    CashLegType,
    CashDirection,
    StockTradeType,
)
from portfolio_client.domain.views import EntryPreview
from portfolio_client.services.fx_rates import RateTable
from portfolio_client.services.ledger_drafts import (
    GroupDraft,
    CashLegDraft,
    StockLegDraft,
    LedgerPlan,
)


class TransactionKind(str, Enum):
    """User-facing transaction kinds."""

    CASH_DEPOSIT = "cash_deposit"
    CASH_WITHDRAWAL = "cash_withdrawal"
    CASH_INTEREST = "cash_interest"
    STOCK_BUY = "stock_buy"
    STOCK_SELL = "stock_sell"
    STOCK_DIVIDEND = "stock_dividend"
    CURRENCY_EXCHANGE = "currency_exchange"


# kind -> (leg type, direction)
_CASH_ONLY_LEGS = {
    TransactionKind.CASH_DEPOSIT: (CashLegType.DEPOSIT, CashDirection.INFLOW),
    TransactionKind.CASH_WITHDRAWAL: (CashLegType.WITHDRAWAL, CashDirection.OUTFLOW),
    TransactionKind.CASH_INTEREST: (CashLegType.INTEREST, CashDirection.INFLOW),
}


@dataclass
class TransactionEntry:
    """
    Raw values of the entry form.

    Numeric fields hold the text the user typed. ``amount`` is the cash
    amount, the dividend amount or the exchange source amount depending on
    ``kind``. ``account_id`` is the settlement account (the source account
    for an exchange).
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
    notes: Optional[str] = None
    external_ref: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.kind, str):
            self.kind = TransactionKind(self.kind)
        if isinstance(self.status, str):
            self.status = TransactionStatus(self.status)


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class TransactionBuilder:
    """
    Builds ledger plans from entry forms.

    Validation failures raise ValidationError with one message per
    field/rule; a currency without a resolvable rate raises
    FxRateUnavailableError. Neither ever substitutes a default.
    """

    def __init__(
        self,
        accounts: Iterable[CashAccount],
        stocks: Iterable[Stock],
        rates: RateTable,
        allow_zero_net_dividend: bool = True,
    ):
        self._accounts = {a.id: a for a in accounts if not a.is_archived}
        self._stocks = {s.id: s for s in stocks}
        self._rates = rates
        self._allow_zero_net_dividend = allow_zero_net_dividend

    # Public API

    def build(self, entry: TransactionEntry) -> LedgerPlan:
        """Validate ``entry`` and return the rows to submit."""
        if entry.kind in _CASH_ONLY_LEGS:
            return self._build_cash_only(entry)
        if entry.kind in (TransactionKind.STOCK_BUY, TransactionKind.STOCK_SELL):
            return self._build_trade(entry)
        if entry.kind == TransactionKind.STOCK_DIVIDEND:
            return self._build_dividend(entry)
        return self._build_exchange(entry)

    def preview(self, entry: TransactionEntry) -> EntryPreview:
        """Return the computed amounts for the confirmation step."""
        plan = self.build(entry)
        first_leg = plan.cash_legs[0]

        if entry.kind == TransactionKind.CURRENCY_EXCHANGE:
            target_leg = plan.cash_legs[1]
            return EntryPreview(
                currency=first_leg.currency,
                gross_amount=first_leg.amount,
                fees=ZERO,
                net_cash=first_leg.amount,
                base_amount=first_leg.base_amount,
                target_currency=target_leg.currency,
                target_amount=target_leg.amount,
            )

        if plan.stock_leg is not None:
            return EntryPreview(
                currency=first_leg.currency,
                gross_amount=plan.stock_leg.gross_amount,
                fees=plan.stock_leg.fees,
                net_cash=first_leg.amount,
                base_amount=first_leg.base_amount,
            )

        return EntryPreview(
            currency=first_leg.currency,
            gross_amount=first_leg.amount,
            fees=ZERO,
            net_cash=first_leg.amount,
            base_amount=first_leg.base_amount,
        )

    # Kinds

    def _build_cash_only(self, entry: TransactionEntry) -> LedgerPlan:
        account = self._account(entry.account_id, "Select a cash account.")
        amount = self._positive(entry.amount, "Enter a valid transaction amount.", "amount")
        rate = self._rates.require(account.currency)

        leg_type, direction = _CASH_ONLY_LEGS[entry.kind]
        rounded_amount = round_amount(amount)
        if rounded_amount <= ZERO:
            raise ValidationError("Enter a valid transaction amount.", field="amount")
        base_amount = round_base(rounded_amount * rate)

        return LedgerPlan(
            group=self._group(entry, GroupType.CASH_ONLY),
            cash_legs=[
                CashLegDraft(
                    cash_account_id=account.id,
                    leg_type=leg_type,
                    direction=direction,
                    amount=rounded_amount,
                    currency=account.currency,
                    fx_rate=rate,
                    base_amount=_signed(base_amount, direction),
                    occurred_at=entry.occurred_at,
                    settled_at=entry.occurred_at,
                    notes=_clean_text(entry.notes),
                )
            ],
        )

    def _build_trade(self, entry: TransactionEntry) -> LedgerPlan:
        is_buy = entry.kind == TransactionKind.STOCK_BUY
        account = self._account(entry.account_id, "Select a settlement cash account.")
        stock = self._stock(entry.stock_id, "Select a stock symbol.")
        shares = self._positive(entry.shares, "Enter a valid share amount.", "shares")
        price = self._positive(entry.price, "Enter a valid price per share.", "price")
        fees = self._fees(entry.fees)
        rate = self._rates.require(account.currency)

        gross = round_amount(shares * price)
        if gross <= ZERO:
            raise ValidationError("Trade amount rounds to zero.", field="shares")
        rounded_fees = round_amount(fees)
        net_cash = gross + rounded_fees if is_buy else gross - rounded_fees
        if not is_buy and net_cash <= ZERO:
            raise ValidationError("Sell proceeds must exceed fees.", field="fees")

        base_gross = round_base(gross * rate)
        base_fees = round_base(rounded_fees * rate)
        base_cash = round_base(net_cash * rate)
        direction = CashDirection.OUTFLOW if is_buy else CashDirection.INFLOW
        notes = _clean_text(entry.notes)

        stock_leg = StockLegDraft(
            stock_id=stock.id,
            symbol=stock.symbol,
            trade_type=StockTradeType.BUY if is_buy else StockTradeType.SELL,
            trade_date=entry.occurred_at,
            settlement_date=entry.occurred_at,
            quantity=round_quantity(shares),
            price_per_share=round_price(price),
            gross_amount=gross,
            fees=rounded_fees,
            currency=account.currency,
            fx_rate=rate,
            base_gross_amount=base_gross,
            base_fees=base_fees,
            status=entry.status,
            notes=notes,
        )
        cash_leg = CashLegDraft(
            cash_account_id=account.id,
            leg_type=CashLegType.STOCK_BUY if is_buy else CashLegType.STOCK_SELL,
            direction=direction,
            amount=abs(net_cash),
            currency=account.currency,
            fx_rate=rate,
            base_amount=_signed(base_cash, direction),
            occurred_at=entry.occurred_at,
            settled_at=entry.occurred_at,
            notes=notes,
            settles_stock_leg=True,
        )
        return LedgerPlan(
            group=self._group(entry, GroupType.STOCK_TRADE),
            cash_legs=[cash_leg],
            stock_leg=stock_leg,
        )

    def _build_dividend(self, entry: TransactionEntry) -> LedgerPlan:
        account = self._account(
            entry.account_id, "Select the cash account receiving the dividend."
        )
        stock = self._stock(entry.stock_id, "Select the stock paying the dividend.")
        dividend = self._positive(entry.amount, "Enter a valid dividend amount.", "amount")
        shares = self._positive(entry.shares, "Enter a valid share count.", "shares")
        fees = self._fees(entry.fees)
        rounded_dividend = round_amount(dividend)
        rounded_fees = round_amount(fees)
        if rounded_dividend <= ZERO:
            raise ValidationError("Enter a valid dividend amount.", field="amount")
        net_cash = rounded_dividend - rounded_fees
        if net_cash < ZERO:
            raise ValidationError("Fees cannot exceed the dividend amount.", field="fees")
        if net_cash == ZERO and not self._allow_zero_net_dividend:
            raise ValidationError(
                "Fees must be less than the dividend amount.", field="fees"
            )

        if entry.dividend_per_share.strip():
            per_share = self._positive(
                entry.dividend_per_share,
                "Enter a valid dividend per share.",
                "dividend_per_share",
            )
        else:
            per_share = dividend / shares
        rate = self._rates.require(account.currency)
        notes = _clean_text(entry.notes)

        stock_leg = StockLegDraft(
            stock_id=stock.id,
            symbol=stock.symbol,
            trade_type=StockTradeType.DIVIDEND,
            trade_date=entry.occurred_at,
            settlement_date=entry.occurred_at,
            quantity=round_quantity(shares),
            price_per_share=round_price(per_share),
            gross_amount=rounded_dividend,
            fees=rounded_fees,
            currency=account.currency,
            fx_rate=rate,
            base_gross_amount=round_base(rounded_dividend * rate),
            base_fees=round_base(rounded_fees * rate),
            status=entry.status,
            notes=notes,
        )
        cash_leg = CashLegDraft(
            cash_account_id=account.id,
            leg_type=CashLegType.DIVIDEND,
            direction=CashDirection.INFLOW,
            amount=net_cash,
            currency=account.currency,
            fx_rate=rate,
            base_amount=round_base(net_cash * rate),
            occurred_at=entry.occurred_at,
            settled_at=entry.occurred_at,
            notes=notes,
            settles_stock_leg=True,
        )
        return LedgerPlan(
            group=self._group(entry, GroupType.DIVIDEND),
            cash_legs=[cash_leg],
            stock_leg=stock_leg,
        )

    def _build_exchange(self, entry: TransactionEntry) -> LedgerPlan:
        source = self._account(entry.account_id, "Select a source cash account.")
        target = self._account(entry.target_account_id, "Select a destination cash account.")
        if source.id == target.id:
            raise ValidationError(
                "Choose two different accounts for an exchange.", field="target_account_id"
            )
        amount = self._positive(entry.amount, "Enter a valid amount to exchange.", "amount")
        rounded_amount = round_amount(amount)
        if rounded_amount <= ZERO:
            raise ValidationError("Enter a valid amount to exchange.", field="amount")

        missing = self._rates.missing([source.currency, target.currency])
        if missing:
            raise FxRateUnavailableError(missing)
        source_rate = self._rates.require(source.currency)
        target_rate = self._rates.require(target.currency)

        base_value = amount * source_rate
        target_amount = round_amount(base_value / target_rate)
        if target_amount <= ZERO:
            raise ValidationError("Unable to calculate the converted amount.", field="amount")

        rounded_base = round_base(base_value)
        notes = _clean_text(entry.notes)

        fx_out = CashLegDraft(
            cash_account_id=source.id,
            leg_type=CashLegType.FX_OUT,
            direction=CashDirection.OUTFLOW,
            amount=rounded_amount,
            currency=source.currency,
            fx_rate=source_rate,
            base_amount=-rounded_base,
            occurred_at=entry.occurred_at,
            settled_at=entry.occurred_at,
            notes=notes,
        )
        fx_in = CashLegDraft(
            cash_account_id=target.id,
            leg_type=CashLegType.FX_IN,
            direction=CashDirection.INFLOW,
            amount=target_amount,
            currency=target.currency,
            fx_rate=target_rate,
            base_amount=rounded_base,
            occurred_at=entry.occurred_at,
            settled_at=entry.occurred_at,
            notes=notes,
        )
        return LedgerPlan(
            group=self._group(entry, GroupType.FX_TRANSFER),
            cash_legs=[fx_out, fx_in],
        )

    # Helpers

    def _group(self, entry: TransactionEntry, group_type: GroupType) -> GroupDraft:
        return GroupDraft(
            group_type=group_type,
            status=entry.status,
            occurred_at=entry.occurred_at,
            settled_at=entry.occurred_at,
            notes=_clean_text(entry.notes),
            external_ref=_clean_text(entry.external_ref),
        )

    def _account(self, account_id: Optional[str], message: str) -> CashAccount:
        account = self._accounts.get(account_id) if account_id else None
        if account is None:
            raise ValidationError(message, field="account_id")
        return account

    def _stock(self, stock_id: Optional[str], message: str) -> Stock:
        stock = self._stocks.get(stock_id) if stock_id else None
        if stock is None:
            raise ValidationError(message, field="stock_id")
        return stock

    @staticmethod
    def _positive(text: str, message: str, field: str) -> Decimal:
        value = parse_decimal(text)
        if value is None or value <= ZERO:
            raise ValidationError(message, field=field)
        return value

    @staticmethod
    def _fees(text: str) -> Decimal:
        if not (text or "").strip():
            return ZERO
        value = parse_decimal(text)
        if value is None or value < ZERO:
            raise ValidationError("Fees must be zero or positive.", field="fees")
        return value


def _signed(amount: Decimal, direction: CashDirection) -> Decimal:
    return amount if direction == CashDirection.INFLOW else -amount
