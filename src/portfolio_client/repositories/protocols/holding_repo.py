"""Holding repository protocol for derived offline positions."""

from typing import Protocol, Optional

from portfolio_client.domain.models import Holding


class HoldingRepository(Protocol):
    """Interface for the derived holdings table."""

    def get(self, ticker_id: str) -> Optional[Holding]:
        """Get the holding of one ticker."""
        ...

    def list_all(self) -> list[Holding]:
        """List all holdings."""
        ...

    def upsert(self, holding: Holding) -> Holding:
        """Insert or update a holding."""
        ...

    def delete(self, ticker_id: str) -> None:
        """Delete the holding of one ticker."""
        ...

    def replace_all(self, holdings: list[Holding]) -> None:
        """Discard every holding and store ``holdings`` instead (for rebuild)."""
        ...
