"""SQLAlchemy implementation of LocalTransactionRepository."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import sessionmaker

from portfolio_client.domain.models import LocalTransaction
from portfolio_client.repositories.sqlalchemy.orm_models import LocalTransactionORM


class SqlAlchemyLocalTransactionRepository:
    """SQLAlchemy-backed offline transaction repository."""

    def __init__(self, sessions: sessionmaker):
        self._sessions = sessions

    def create(self, txn: LocalTransaction) -> LocalTransaction:
        """Persist a new transaction."""
        with self._sessions.begin() as db:
            orm_txn = LocalTransactionORM(
                txn_id=txn.txn_id,
                ticker_id=txn.ticker_id,
                txn_type=txn.txn_type,
                txn_date=txn.txn_date,
                quantity=txn.quantity,
                price=txn.price,
                note=txn.note,
                recorded_at=datetime.utcnow(),
            )
            db.add(orm_txn)
            db.flush()
            db.refresh(orm_txn)
            return self._to_domain(orm_txn)

    def get_by_id(self, txn_id: str) -> Optional[LocalTransaction]:
        """Retrieve transaction by ID."""
        with self._sessions.begin() as db:
            orm_txn = db.query(LocalTransactionORM).filter(
                LocalTransactionORM.txn_id == txn_id
            ).first()
            return self._to_domain(orm_txn) if orm_txn else None

    def list_all(self, ticker_id: Optional[str] = None) -> list[LocalTransaction]:
        """
        List transactions ordered by date ascending, optionally for one ticker.

        Transactions on the same date come back in the order they were recorded.
        """
        with self._sessions.begin() as db:
            query = db.query(LocalTransactionORM)
            if ticker_id:
                query = query.filter(LocalTransactionORM.ticker_id == ticker_id)
            orm_txns = query.order_by(
                LocalTransactionORM.txn_date,
                LocalTransactionORM.recorded_at,
                LocalTransactionORM.txn_id,
            ).all()
            return [self._to_domain(t) for t in orm_txns]

    def delete(self, txn_id: str) -> None:
        """Delete a transaction."""
        with self._sessions.begin() as db:
            db.query(LocalTransactionORM).filter(
                LocalTransactionORM.txn_id == txn_id
            ).delete()

    def delete_by_ticker(self, ticker_id: str) -> None:
        """Delete every transaction of a ticker."""
        with self._sessions.begin() as db:
            db.query(LocalTransactionORM).filter(
                LocalTransactionORM.ticker_id == ticker_id
            ).delete()

    @staticmethod
    def _to_domain(orm: LocalTransactionORM) -> LocalTransaction:
        """Convert ORM model to domain model."""
        return LocalTransaction(
            txn_id=orm.txn_id,
            ticker_id=orm.ticker_id,
            txn_type=orm.txn_type,
            txn_date=orm.txn_date,
            quantity=Decimal(str(orm.quantity)),
            price=Decimal(str(orm.price)),
            note=orm.note,
        )
