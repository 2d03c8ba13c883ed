"""Repository layer - data access abstractions and implementations."""

from portfolio_client.repositories.protocols import (
    CredentialStore,
    CacheRepository,
    PendingGroupRepository,
    TickerRepository,
    LocalTransactionRepository,
    CapitalRepository,
    HoldingRepository,
)

__all__ = [
    "CredentialStore",
    "CacheRepository",
    "PendingGroupRepository",
    "TickerRepository",
    "LocalTransactionRepository",
    "CapitalRepository",
    "HoldingRepository",
]
