"""SQLAlchemy implementation of CapitalRepository."""

from decimal import Decimal

from sqlalchemy.orm import sessionmaker

from portfolio_client.domain.models import CapitalOperation
from portfolio_client.repositories.sqlalchemy.orm_models import CapitalOperationORM


class SqlAlchemyCapitalRepository:
    """SQLAlchemy-backed capital operation repository."""

    def __init__(self, sessions: sessionmaker):
        self._sessions = sessions

    def create(self, operation: CapitalOperation) -> CapitalOperation:
        """Persist a new capital operation."""
        with self._sessions.begin() as db:
            orm_op = CapitalOperationORM(
                operation_id=operation.operation_id,
                capital_type=operation.capital_type,
                amount=operation.amount,
                operation_date=operation.operation_date,
                note=operation.note,
            )
            db.add(orm_op)
            db.flush()
            db.refresh(orm_op)
            return self._to_domain(orm_op)

    def list_all(self) -> list[CapitalOperation]:
        """List capital operations ordered by date ascending."""
        with self._sessions.begin() as db:
            orm_ops = db.query(CapitalOperationORM).order_by(
                CapitalOperationORM.operation_date
            ).all()
            return [self._to_domain(o) for o in orm_ops]

    def delete(self, operation_id: str) -> None:
        """Delete a capital operation."""
        with self._sessions.begin() as db:
            db.query(CapitalOperationORM).filter(
                CapitalOperationORM.operation_id == operation_id
            ).delete()

    @staticmethod
    def _to_domain(orm: CapitalOperationORM) -> CapitalOperation:
        """Convert ORM model to domain model."""
        return CapitalOperation(
            operation_id=orm.operation_id,
            capital_type=orm.capital_type,
            amount=Decimal(str(orm.amount)),
            operation_date=orm.operation_date,
            note=orm.note,
        )
