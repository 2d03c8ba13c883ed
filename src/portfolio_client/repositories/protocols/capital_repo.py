"""Capital operation repository protocol."""

from typing import Protocol

from portfolio_client.domain.models import CapitalOperation


class CapitalRepository(Protocol):
    """Interface for offline capital operation data access."""

    def create(self, operation: CapitalOperation) -> CapitalOperation:
        """Persist a new capital operation."""
        ...

    def list_all(self) -> list[CapitalOperation]:
        """List capital operations ordered by date ascending."""
        ...

    def delete(self, operation_id: str) -> None:
        """Delete a capital operation."""
        ...
