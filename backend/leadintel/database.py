"""Database engine, session factory and declarative base."""

from typing import Iterator

from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from leadintel.config import settings


class Base(DeclarativeBase):
    pass


def engine_options(database_url: str) -> dict:
    """Keyword arguments for create_engine; SQLite has no connection pool to size."""
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_size": 5, "max_overflow": 2, "pool_pre_ping": True}


engine = create_engine(settings.database_url, **engine_options(settings.database_url))
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def get_sync_session() -> Session:
    return SessionLocal()


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a session closed after the request."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")
