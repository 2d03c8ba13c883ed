"""Local SQLite database holding the portfolio cache, pending groups and the offline ledger."""

from typing import Optional

from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import sessionmaker, declarative_base

Base = declarative_base()

# Module-level database state (reopened when the context is rebuilt)
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def open_database(database_url: str) -> None:
    """Create the engine for ``database_url`` and any missing tables."""
    global _engine, _SessionLocal

    close_database()
    _engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False},  # SQLite-specific
        echo=False,
    )
    _SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=_engine,
    )

    from portfolio_client.repositories.sqlalchemy import orm_models  # noqa: F401
    Base.metadata.create_all(bind=_engine)


def get_session_factory() -> sessionmaker:
    """Session factory of the open database; repositories open one session per operation."""
    if _SessionLocal is None:
        raise RuntimeError("open_database() must be called first")
    return _SessionLocal


def close_database() -> None:
    """Dispose of the engine, if one is open."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()

    _engine = None
    _SessionLocal = None
