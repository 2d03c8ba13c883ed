"""Pending group repository protocol."""

from typing import Protocol

from portfolio_client.domain.models import PendingGroup


class PendingGroupRepository(Protocol):
    """Interface for markers of groups whose submission has not completed."""

    def add(self, group: PendingGroup) -> None:
        """Record a pending group."""
        ...

    def remove(self, group_id: str) -> None:
        """Forget a pending group."""
        ...

    def list_all(self) -> list[PendingGroup]:
        """List pending groups, oldest first."""
        ...
