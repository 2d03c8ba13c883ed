"""Pydantic schemas for API request/response."""

from portfolio_client.api.schemas.auth import Credentials, SessionResponse
from portfolio_client.api.schemas.portfolio import (
    AccountCashResponse,
    CashBalancesResponse,
    PositionResponse,
    PositionDetailResponse,
    SummaryResponse,
    LoadResponse,
    CashAccountCreate,
    StockCreate,
    StockUpdate,
)
from portfolio_client.api.schemas.transaction import (
    TransactionEntryRequest,
    EntryPreviewResponse,
    SubmissionResponse,
    PendingGroupResponse,
    ReconciliationResponse,
)
from portfolio_client.api.schemas.analysis import (
    RiskMetricsResponse,
    SeriesPointResponse,
    ComparisonResponse,
    BenchmarkResponse,
)
from portfolio_client.api.schemas.local import (
    TickerCreate,
    TickerUpdate,
    TickerResponse,
    LocalTransactionRequest,
    LocalTransactionResponse,
    HoldingResponse,
    CapitalRequest,
    CapitalResponse,
    CapitalSummaryResponse,
)

__all__ = [
    "Credentials",
    "SessionResponse",
    "AccountCashResponse",
    "CashBalancesResponse",
    "PositionResponse",
    "PositionDetailResponse",
    "SummaryResponse",
    "LoadResponse",
    "CashAccountCreate",
    "StockCreate",
    "StockUpdate",
    "TransactionEntryRequest",
    "EntryPreviewResponse",
    "SubmissionResponse",
    "PendingGroupResponse",
    "ReconciliationResponse",
    "RiskMetricsResponse",
    "SeriesPointResponse",
    "ComparisonResponse",
    "BenchmarkResponse",
    "TickerCreate",
    "TickerUpdate",
    "TickerResponse",
    "LocalTransactionRequest",
    "LocalTransactionResponse",
    "HoldingResponse",
    "CapitalRequest",
    "CapitalResponse",
    "CapitalSummaryResponse",
]
