"""Domain models package."""

from portfolio_client.domain.models.enums import (
    GroupType,
    TransactionStatus,
    CashLegType,
    CashDirection,
    StockTradeType,
    Market,
    LocalTransactionType,
    CapitalType,
    CASH_FLOW_LEG_TYPES,
    EXTERNAL_FLOW_LEG_TYPES,
)
from portfolio_client.domain.models.ledger import (
    BackendRecord,
    Stock,
    CashAccount,
    TransactionGroup,
    CashTransaction,
    StockTransaction,
    PortfolioPosition,
    PortfolioSettings,
    HistoricalPrice,
    PortfolioSnapshot,
    CurrencyRate,
    HistoricalPortfolioSnapshot,
    BenchmarkSnapshot,
)
from portfolio_client.domain.models.local import (
    Ticker,
    LocalTransaction,
    Holding,
    CapitalOperation,
    CapitalSummary,
    PendingGroup,
)

__all__ = [
    "GroupType",
    "TransactionStatus",
    "CashLegType",
    "CashDirection",
    "StockTradeType",
    "Market",
    "LocalTransactionType",
    "CapitalType",
    "CASH_FLOW_LEG_TYPES",
    "EXTERNAL_FLOW_LEG_TYPES",
    "BackendRecord",
    "Stock",
    "CashAccount",
    "TransactionGroup",
    "CashTransaction",
    "StockTransaction",
    "PortfolioPosition",
    "PortfolioSettings",
    "HistoricalPrice",
    "PortfolioSnapshot",
    "CurrencyRate",
    "HistoricalPortfolioSnapshot",
    "BenchmarkSnapshot",
    "Ticker",
    "LocalTransaction",
    "Holding",
    "CapitalOperation",
    "CapitalSummary",
    "PendingGroup",
]
