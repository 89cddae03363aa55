"""Database engine and session management for the SQL backend."""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from splitsmart.models import Base

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine (SQLite uses StaticPool for simplicity in dev/test)."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def create_session_factory(database_url: str, echo: bool = False) -> sessionmaker[Session]:
    """Create a session factory and make sure all tables exist.

    Args:
        database_url: SQLAlchemy connection string
        echo: Log SQL statements

    Returns:
        sessionmaker bound to the new engine
    """
    engine = create_db_engine(database_url, echo=echo)
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database ready at {engine.url.render_as_string(hide_password=True)}")
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


__all__ = ["create_db_engine", "create_session_factory"]
