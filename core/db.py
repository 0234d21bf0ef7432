# ghost/core/db.py
"""
Database management for Ghost invite tracker.
Single local database, SQLite by default.
"""
import logging
from contextlib import contextmanager
from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from config import Config
from models.base import Base

logger = logging.getLogger(__name__)

# Database engines
_engine: Optional[Engine] = None
_SessionFactory = None


def configure_engine(database_url: str, **engine_kwargs) -> Engine:
    """
    Create (or replace) the process engine for an explicit URL.

    Args:
        database_url: SQLAlchemy URL
        **engine_kwargs: Extra arguments for create_engine

    Returns:
        Engine instance
    """
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = create_engine(database_url, echo=False, **engine_kwargs)
    _SessionFactory = None
    logger.info(f"Database engine created: {database_url}")
    return _engine


def get_engine() -> Engine:
    """Get or create database engine."""
    if _engine is None:
        database_url = Config.get(Config.DATABASE_URL, "sqlite:///ghost.db")
        configure_engine(database_url, pool_pre_ping=True)
    return _engine


def get_session_factory():
    """Get or create session factory."""
    global _SessionFactory
    if _SessionFactory is None:
        engine = get_engine()
        _SessionFactory = sessionmaker(bind=engine)
        logger.info("Session factory created")
    return _SessionFactory


def get_session() -> Session:
    """
    Get a new database session.

    Returns:
        Session instance
    """
    factory = get_session_factory()
    return factory()


@contextmanager
def get_db_session_ctx():
    """
    Context manager for database sessions.

    Usage:
        with get_db_session_ctx() as session:
            ledger = JoinLedger(session)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database error: {e}")
        raise
    finally:
        session.close()


def setup_database():
    """Initialize database - create all tables."""
    logger.info("Setting up database...")
    engine = get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database setup completed")


def drop_all_tables():
    """Drop all tables - USE WITH CAUTION!"""
    logger.warning("Dropping all tables...")
    engine = get_engine()
    Base.metadata.drop_all(engine)
    logger.info("All tables dropped")


def dialect_insert(session: Session, model):
    """
    INSERT construct supporting ON CONFLICT for the session's dialect.

    Args:
        session: Active session (its bind decides the dialect)
        model: Mapped class

    Returns:
        sqlite or postgresql Insert
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"Unsupported database dialect for upserts: {dialect}")
    return insert(model)
