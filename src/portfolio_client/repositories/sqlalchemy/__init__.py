"""SQLAlchemy repository implementations."""

from portfolio_client.repositories.sqlalchemy.database import (
    open_database,
    get_session_factory,
    close_database,
    Base,
)
from portfolio_client.repositories.sqlalchemy.cache_repo import SqlAlchemyCacheRepository
from portfolio_client.repositories.sqlalchemy.pending_group_repo import (
    SqlAlchemyPendingGroupRepository,
)
from portfolio_client.repositories.sqlalchemy.ticker_repo import SqlAlchemyTickerRepository
from portfolio_client.repositories.sqlalchemy.local_transaction_repo import (
    SqlAlchemyLocalTransactionRepository,
)
from portfolio_client.repositories.sqlalchemy.capital_repo import SqlAlchemyCapitalRepository
from portfolio_client.repositories.sqlalchemy.holding_repo import SqlAlchemyHoldingRepository

__all__ = [
    "get_session_factory",
    "open_database",
    "close_database",
    "Base",
    "SqlAlchemyCacheRepository",
    "SqlAlchemyPendingGroupRepository",
    "SqlAlchemyTickerRepository",
    "SqlAlchemyLocalTransactionRepository",
    "SqlAlchemyCapitalRepository",
    "SqlAlchemyHoldingRepository",
]
