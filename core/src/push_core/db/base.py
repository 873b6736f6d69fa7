"""Declarative base plus engine and session factories."""

from sqlalchemy import Engine, MetaData, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

# Matches the names used by the Alembic migrations (e.g. ix_events_date).
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def create_db_engine(dsn: str, **kwargs: object) -> Engine:
    """Create an engine for ``dsn``.

    The scheduler passes ``pool_pre_ping=True`` so a PostgreSQL restart
    between two beat runs does not fail the next run.
    """
    return create_engine(dsn, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Sessions that keep loaded rows readable after commit or close."""
    return sessionmaker(bind=engine, expire_on_commit=False)
