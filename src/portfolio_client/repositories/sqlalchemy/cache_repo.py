"""SQLAlchemy implementation of CacheRepository."""

from datetime import datetime
from typing import Optional

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, sessionmaker

from portfolio_client.repositories.sqlalchemy.orm_models import CacheEntryORM, CacheMetaORM

_META_ROW_ID = 1


class SqlAlchemyCacheRepository:
    """SQLAlchemy-backed key-value cache of fetched collections."""

    def __init__(self, sessions: sessionmaker):
        self._sessions = sessions

    # Entries

    def get_entry(self, key: str) -> Optional[str]:
        """Return the JSON payload stored under ``key``."""
        with self._sessions.begin() as db:
            orm_entry = db.query(CacheEntryORM).filter(CacheEntryORM.key == key).first()
            return orm_entry.payload if orm_entry else None

    def put_entry(self, key: str, payload: str) -> None:
        """Insert or replace the JSON payload stored under ``key``."""
        now = datetime.utcnow()
        stmt = sqlite_insert(CacheEntryORM).values(key=key, payload=payload, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CacheEntryORM.key],
            set_={"payload": payload, "updated_at": now},
        )
        with self._sessions.begin() as db:
            db.execute(stmt)

    def clear(self) -> None:
        """Delete every entry and the metadata row."""
        with self._sessions.begin() as db:
            db.query(CacheEntryORM).delete()
            db.query(CacheMetaORM).delete()

    # Metadata

    def get_schema_version(self) -> Optional[int]:
        with self._sessions.begin() as db:
            meta = self._get_meta(db)
            return meta.schema_version if meta else None

    def set_schema_version(self, version: int) -> None:
        with self._sessions.begin() as db:
            meta = self._get_meta(db)
            if meta:
                meta.schema_version = version
            else:
                db.add(CacheMetaORM(id=_META_ROW_ID, schema_version=version))

    def get_last_updated(self) -> Optional[datetime]:
        with self._sessions.begin() as db:
            meta = self._get_meta(db)
            return meta.last_updated_at if meta else None

    def set_last_updated(self, when: datetime) -> None:
        with self._sessions.begin() as db:
            meta = self._get_meta(db)
            if meta is None:
                raise ValueError("Cache schema version must be recorded before use")
            meta.last_updated_at = when

    @staticmethod
    def _get_meta(db: Session) -> Optional[CacheMetaORM]:
        return db.query(CacheMetaORM).filter(CacheMetaORM.id == _META_ROW_ID).first()
