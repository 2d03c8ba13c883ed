"""Repository protocol definitions (interfaces)."""

from portfolio_client.repositories.protocols.credential_store import CredentialStore
from portfolio_client.repositories.protocols.cache_repo import CacheRepository
from portfolio_client.repositories.protocols.pending_group_repo import PendingGroupRepository
from portfolio_client.repositories.protocols.ticker_repo import TickerRepository
from portfolio_client.repositories.protocols.local_transaction_repo import (
    LocalTransactionRepository,
)
from portfolio_client.repositories.protocols.capital_repo import CapitalRepository
from portfolio_client.repositories.protocols.holding_repo import HoldingRepository

__all__ = [
    "CredentialStore",
    "CacheRepository",
    "PendingGroupRepository",
    "TickerRepository",
    "LocalTransactionRepository",
    "CapitalRepository",
    "HoldingRepository",
]
