"""Ticker repository protocol."""

from typing import Protocol, Optional

from portfolio_client.domain.models import Ticker


class TickerRepository(Protocol):
    """Interface for offline ticker data access."""

    def create(self, ticker: Ticker) -> Ticker:
        """Persist a new ticker."""
        ...

    def get_by_id(self, ticker_id: str) -> Optional[Ticker]:
        """Retrieve ticker by ID."""
        ...

    def get_by_code(self, code: str) -> Optional[Ticker]:
        """Retrieve ticker by code, ignoring case."""
        ...

    def list_all(self) -> list[Ticker]:
        """List all tickers ordered by code."""
        ...

    def update(self, ticker: Ticker) -> Ticker:
        """Update an existing ticker."""
        ...

    def delete(self, ticker_id: str) -> None:
        """Delete a ticker (hard delete)."""
        ...
