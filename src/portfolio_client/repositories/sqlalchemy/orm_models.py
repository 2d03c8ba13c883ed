"""SQLAlchemy ORM model definitions."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Text,
    ForeignKey,
    Numeric,
    Enum as SqlEnum,
)

from portfolio_client.repositories.sqlalchemy.database import Base
from portfolio_client.domain.models.enums import LocalTransactionType, CapitalType, Market


# Offline snapshot cache


class CacheEntryORM(Base):
    """One cached collection, stored as JSON text."""

    __tablename__ = "cache_entries"

    key = Column(String(64), primary_key=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class CacheMetaORM(Base):
    """Single-row table holding the cache schema version and last refresh time."""

    __tablename__ = "cache_meta"

    id = Column(Integer, primary_key=True)
    schema_version = Column(Integer, nullable=False)
    last_updated_at = Column(DateTime, nullable=True)


# Submission saga


class PendingGroupORM(Base):
    """Transaction group created on the backend whose legs are not all saved."""

    __tablename__ = "pending_groups"

    group_id = Column(String(36), primary_key=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    description = Column(Text, nullable=True)


# Offline ledger


class TickerORM(Base):
    """SQLAlchemy model for Ticker."""

    __tablename__ = "tickers"

    ticker_id = Column(String(36), primary_key=True)
    code = Column(String(20), nullable=False)
    name = Column(String(255), nullable=False)
    market = Column(SqlEnum(Market), nullable=False, default=Market.US)
    currency = Column(String(3), nullable=False, default="USD")


class LocalTransactionORM(Base):
    """SQLAlchemy model for LocalTransaction."""

    __tablename__ = "local_transactions"

    txn_id = Column(String(36), primary_key=True)
    ticker_id = Column(String(36), ForeignKey("tickers.ticker_id"), nullable=False)
    txn_type = Column(SqlEnum(LocalTransactionType), nullable=False)
    txn_date = Column(DateTime, nullable=False)
    quantity = Column(Numeric(precision=18, scale=6), nullable=False)
    price = Column(Numeric(precision=18, scale=4), nullable=False)
    note = Column(Text, nullable=True)
    # Tie-breaker for transactions on the same date
    recorded_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class CapitalOperationORM(Base):
    """SQLAlchemy model for CapitalOperation."""

    __tablename__ = "capital_operations"

    operation_id = Column(String(36), primary_key=True)
    capital_type = Column(SqlEnum(CapitalType), nullable=False)
    amount = Column(Numeric(precision=18, scale=2), nullable=False)
    operation_date = Column(DateTime, nullable=False)
    note = Column(Text, nullable=True)


class HoldingORM(Base):
    """SQLAlchemy model for Holding (derived by replaying local transactions)."""

    __tablename__ = "holdings"

    ticker_id = Column(String(36), ForeignKey("tickers.ticker_id"), primary_key=True)
    quantity = Column(Numeric(precision=18, scale=6), default=Decimal("0"))
    average_cost = Column(Numeric(precision=18, scale=6), default=Decimal("0"))
    total_cost_basis = Column(Numeric(precision=18, scale=6), default=Decimal("0"))
