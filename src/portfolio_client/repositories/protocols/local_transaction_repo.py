"""Offline transaction repository protocol."""

from typing import Protocol, Optional

from portfolio_client.domain.models import LocalTransaction


class LocalTransactionRepository(Protocol):
    """Interface for offline ledger transaction data access."""

    def create(self, txn: LocalTransaction) -> LocalTransaction:
        """Persist a new transaction."""
        ...

    def get_by_id(self, txn_id: str) -> Optional[LocalTransaction]:
        """Retrieve transaction by ID."""
        ...

    def list_all(self, ticker_id: Optional[str] = None) -> list[LocalTransaction]:
        """List transactions ordered by date ascending, optionally for one ticker."""
        ...

    def delete(self, txn_id: str) -> None:
        """Delete a transaction."""
        ...

    def delete_by_ticker(self, ticker_id: str) -> None:
        """Delete every transaction of a ticker."""
        ...
