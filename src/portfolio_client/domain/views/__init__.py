"""View models for service outputs."""

from portfolio_client.domain.views.portfolio import (
    AccountCashValue,
    CashBalances,
    PositionMetrics,
    PortfolioSummary,
)
from portfolio_client.domain.views.analysis import (
    RiskMetrics,
    SeriesPoint,
    PerformanceComparison,
)
from portfolio_client.domain.views.submission import (
    EntryPreview,
    SubmissionResult,
    ReconciliationReport,
)

__all__ = [
    "AccountCashValue",
    "CashBalances",
    "PositionMetrics",
    "PortfolioSummary",
    "RiskMetrics",
    "SeriesPoint",
    "PerformanceComparison",
    "EntryPreview",
    "SubmissionResult",
    "ReconciliationReport",
]
