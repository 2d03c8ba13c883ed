"""Service layer - business logic orchestration."""

from portfolio_client.services.fx_rates import RateTable, resolve_rates_to_base
from portfolio_client.services.ledger_drafts import (
    GroupDraft,
    CashLegDraft,
    StockLegDraft,
    LedgerPlan,
)
from portfolio_client.services.transaction_builder import (
    TransactionBuilder,
    TransactionEntry,
    TransactionKind,
)
from portfolio_client.services.local_portfolio_service import (
    LocalPortfolioService,
    LocalTransactionCreate,
)
from portfolio_client.services.portfolio_data_service import PortfolioDataService, PortfolioFetch
from portfolio_client.services.transaction_submitter import TransactionSubmitter
from portfolio_client.services.analysis_service import AnalysisService, TimeRange, BENCHMARKS
from portfolio_client.services.portfolio_cache import PortfolioCache, PortfolioState
from portfolio_client.services.portfolio_store import PortfolioStore
from portfolio_client.services.valuation import HoldingSortOption

__all__ = [
    "RateTable",
    "resolve_rates_to_base",
    "GroupDraft",
    "CashLegDraft",
    "StockLegDraft",
    "LedgerPlan",
    "TransactionBuilder",
    "TransactionEntry",
    "TransactionKind",
    "LocalPortfolioService",
    "LocalTransactionCreate",
    "PortfolioDataService",
    "PortfolioFetch",
    "TransactionSubmitter",
    "AnalysisService",
    "TimeRange",
    "BENCHMARKS",
    "PortfolioCache",
    "PortfolioState",
    "PortfolioStore",
    "HoldingSortOption",
]
