"""SQLAlchemy implementation of PendingGroupRepository."""

from sqlalchemy.orm import sessionmaker

from portfolio_client.domain.models import PendingGroup
from portfolio_client.repositories.sqlalchemy.orm_models import PendingGroupORM


class SqlAlchemyPendingGroupRepository:
    """SQLAlchemy-backed store of pending group markers."""

    def __init__(self, sessions: sessionmaker):
        self._sessions = sessions

    def add(self, group: PendingGroup) -> None:
        """Record a pending group."""
        with self._sessions.begin() as db:
            db.merge(
                PendingGroupORM(
                    group_id=group.group_id,
                    created_at=group.created_at,
                    description=group.description,
                )
            )

    def remove(self, group_id: str) -> None:
        """Forget a pending group."""
        with self._sessions.begin() as db:
            db.query(PendingGroupORM).filter(
                PendingGroupORM.group_id == group_id
            ).delete()

    def list_all(self) -> list[PendingGroup]:
        """List pending groups, oldest first."""
        with self._sessions.begin() as db:
            orm_groups = db.query(PendingGroupORM).order_by(PendingGroupORM.created_at).all()
            return [
                PendingGroup(
                    group_id=g.group_id,
                    created_at=g.created_at,
                    description=g.description,
                )
                for g in orm_groups
            ]
