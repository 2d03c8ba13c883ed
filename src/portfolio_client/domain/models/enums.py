"""Enumerations for domain models."""

from enum import Enum


class GroupType(str, Enum):
    """Kind of economic event a transaction group represents."""

    CASH_ONLY = "cash_only"
    STOCK_TRADE = "stock_trade"
    DIVIDEND = "dividend"
    FX_TRANSFER = "fx_transfer"
    ADJUSTMENT = "adjustment"


class TransactionStatus(str, Enum):
    """Settlement status of a group or leg (transitions are server-side)."""

    PENDING = "pending"
    SETTLED = "settled"
    VOID = "void"


class CashLegType(str, Enum):
    """Types of cash ledger legs."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    FX_IN = "fx_in"
    FX_OUT = "fx_out"
    STOCK_BUY = "stock_buy"
    STOCK_SELL = "stock_sell"
    DIVIDEND = "dividend"
    FEE = "fee"
    ADJUSTMENT = "adjustment"
    INTEREST = "interest"


class CashDirection(str, Enum):
    """Direction of a cash leg; the sign of the base amount follows it."""

    INFLOW = "inflow"
    OUTFLOW = "outflow"


class StockTradeType(str, Enum):
    """Types of stock ledger legs."""

    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"


class Market(str, Enum):
    """Listing markets for tickers."""

    US = "US"
    HK = "HK"
    CN = "CN"


class LocalTransactionType(str, Enum):
    """Transaction types of the offline ledger."""

    BUY = "Buy"
    SELL = "Sell"
    DIVIDEND = "Dividend"


class CapitalType(str, Enum):
    """Capital movements of the offline ledger."""

    INITIAL_DEPOSIT = "Initial Deposit"
    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"
    INTEREST = "Interest"


# Legs that move money into or out of the portfolio as a whole
EXTERNAL_FLOW_LEG_TYPES = frozenset(
    {
        CashLegType.DEPOSIT,
        CashLegType.WITHDRAWAL,
        CashLegType.DIVIDEND,
        CashLegType.FEE,
        CashLegType.ADJUSTMENT,
        CashLegType.INTEREST,
    }
)

# Legs counted toward the day's cash flow by default
CASH_FLOW_LEG_TYPES = frozenset(
    {
        CashLegType.DEPOSIT,
        CashLegType.WITHDRAWAL,
        CashLegType.DIVIDEND,
        CashLegType.FEE,
        CashLegType.ADJUSTMENT,
        CashLegType.INTEREST,
        CashLegType.FX_IN,
        CashLegType.FX_OUT,
        CashLegType.STOCK_BUY,
        CashLegType.STOCK_SELL,
    }
)
