"""Cache repository protocol for the offline snapshot cache."""

from datetime import datetime
from typing import Protocol, Optional


class CacheRepository(Protocol):
    """Interface for keyed persistence of last-fetched collections."""

    def get_entry(self, key: str) -> Optional[str]:
        """Return the JSON payload stored under ``key``."""
        ...

    def put_entry(self, key: str, payload: str) -> None:
        """Insert or replace the JSON payload stored under ``key``."""
        ...

    def clear(self) -> None:
        """Delete every entry and the metadata row."""
        ...

    def get_schema_version(self) -> Optional[int]:
        """Return the schema version the cache was written with."""
        ...

    def set_schema_version(self, version: int) -> None:
        """Record the schema version the cache is written with."""
        ...

    def get_last_updated(self) -> Optional[datetime]:
        """Return when the cache was last refreshed from the backend."""
        ...

    def set_last_updated(self, when: datetime) -> None:
        """Record when the cache was last refreshed from the backend."""
        ...
