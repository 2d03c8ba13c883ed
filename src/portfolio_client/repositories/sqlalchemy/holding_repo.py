"""SQLAlchemy implementation of HoldingRepository."""

from decimal import Decimal
from typing import Optional

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import sessionmaker

from portfolio_client.domain.models import Holding
from portfolio_client.repositories.sqlalchemy.orm_models import HoldingORM


class SqlAlchemyHoldingRepository:
    """SQLAlchemy-backed repository for derived holdings."""

    def __init__(self, sessions: sessionmaker):
        self._sessions = sessions

    def get(self, ticker_id: str) -> Optional[Holding]:
        """Get the holding of one ticker."""
        with self._sessions.begin() as db:
            orm_holding = db.query(HoldingORM).filter(
                HoldingORM.ticker_id == ticker_id
            ).first()
            return self._to_domain(orm_holding) if orm_holding else None

    def list_all(self) -> list[Holding]:
        """List all holdings."""
        with self._sessions.begin() as db:
            orm_holdings = db.query(HoldingORM).order_by(HoldingORM.ticker_id).all()
            return [self._to_domain(h) for h in orm_holdings]

    def upsert(self, holding: Holding) -> Holding:
        """Insert or update a holding."""
        values = {
            "quantity": holding.quantity,
            "average_cost": holding.average_cost,
            "total_cost_basis": holding.total_cost_basis,
        }
        stmt = sqlite_insert(HoldingORM).values(ticker_id=holding.ticker_id, **values)
        stmt = stmt.on_conflict_do_update(index_elements=[HoldingORM.ticker_id], set_=values)
        with self._sessions.begin() as db:
            db.execute(stmt)
            orm_holding = db.query(HoldingORM).filter(
                HoldingORM.ticker_id == holding.ticker_id
            ).one()
            return self._to_domain(orm_holding)

    def delete(self, ticker_id: str) -> None:
        """Delete the holding of one ticker."""
        with self._sessions.begin() as db:
            db.query(HoldingORM).filter(HoldingORM.ticker_id == ticker_id).delete()

    def replace_all(self, holdings: list[Holding]) -> None:
        """Discard every holding and store ``holdings`` instead (for rebuild)."""
        with self._sessions.begin() as db:
            db.query(HoldingORM).delete()
            for holding in holdings:
                db.add(
                    HoldingORM(
                        ticker_id=holding.ticker_id,
                        quantity=holding.quantity,
                        average_cost=holding.average_cost,
                        total_cost_basis=holding.total_cost_basis,
                    )
                )

    @staticmethod
    def _to_domain(orm: HoldingORM) -> Holding:
        """Convert ORM model to domain model."""
        return Holding(
            ticker_id=orm.ticker_id,
            quantity=Decimal(str(orm.quantity)) if orm.quantity else Decimal("0"),
            average_cost=Decimal(str(orm.average_cost)) if orm.average_cost else Decimal("0"),
            total_cost_basis=(
                Decimal(str(orm.total_cost_basis)) if orm.total_cost_basis else Decimal("0")
            ),
        )
