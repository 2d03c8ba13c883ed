"""SQLAlchemy implementation of TickerRepository."""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import sessionmaker

from portfolio_client.domain.models import Ticker
from portfolio_client.repositories.sqlalchemy.orm_models import TickerORM


class SqlAlchemyTickerRepository:
    """SQLAlchemy-backed ticker repository."""

    def __init__(self, sessions: sessionmaker):
        self._sessions = sessions

    def create(self, ticker: Ticker) -> Ticker:
        """Persist a new ticker."""
        with self._sessions.begin() as db:
            orm_ticker = TickerORM(
                ticker_id=ticker.ticker_id,
                code=ticker.code,
                name=ticker.name,
                market=ticker.market,
                currency=ticker.currency,
            )
            db.add(orm_ticker)
            db.flush()
            db.refresh(orm_ticker)
            return self._to_domain(orm_ticker)

    def get_by_id(self, ticker_id: str) -> Optional[Ticker]:
        """Retrieve ticker by ID."""
        with self._sessions.begin() as db:
            orm_ticker = db.query(TickerORM).filter(
                TickerORM.ticker_id == ticker_id
            ).first()
            return self._to_domain(orm_ticker) if orm_ticker else None

    def get_by_code(self, code: str) -> Optional[Ticker]:
        """Retrieve ticker by code, ignoring case."""
        with self._sessions.begin() as db:
            orm_ticker = db.query(TickerORM).filter(
                func.upper(TickerORM.code) == code.upper()
            ).first()
            return self._to_domain(orm_ticker) if orm_ticker else None

    def list_all(self) -> list[Ticker]:
        """List all tickers ordered by code."""
        with self._sessions.begin() as db:
            orm_tickers = db.query(TickerORM).order_by(TickerORM.code).all()
            return [self._to_domain(t) for t in orm_tickers]

    def update(self, ticker: Ticker) -> Ticker:
        """Update an existing ticker."""
        with self._sessions.begin() as db:
            orm_ticker = db.query(TickerORM).filter(
                TickerORM.ticker_id == ticker.ticker_id
            ).first()
            if orm_ticker is None:
                raise ValueError(f"Ticker not found: {ticker.ticker_id}")
            orm_ticker.code = ticker.code
            orm_ticker.name = ticker.name
            orm_ticker.market = ticker.market
            orm_ticker.currency = ticker.currency
            db.flush()
            db.refresh(orm_ticker)
            return self._to_domain(orm_ticker)

    def delete(self, ticker_id: str) -> None:
        """Delete a ticker."""
        with self._sessions.begin() as db:
            db.query(TickerORM).filter(TickerORM.ticker_id == ticker_id).delete()

    @staticmethod
    def _to_domain(orm: TickerORM) -> Ticker:
        """Convert ORM model to domain model."""
        return Ticker(
            ticker_id=orm.ticker_id,
            code=orm.code,
            name=orm.name,
            market=orm.market,
            currency=orm.currency,
        )
