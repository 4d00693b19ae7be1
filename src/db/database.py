"""
Database connection and session management
"""

from contextlib import contextmanager
from functools import lru_cache
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from loguru import logger as log

from common import global_config
from src.services.meme.errors import DataFetchError


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """
    Build the engine on first use so importing this module never needs a database.

    Raises:
        DataFetchError: If DATABASE_URI is not configured
    """
    if not global_config.database_uri:
        raise DataFetchError("DATABASE_URI is not configured")
    return create_engine(
        global_config.database_uri,
        pool_pre_ping=True,
        pool_recycle=300,
        echo=False,  # Set to True for SQL query logging
    )


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


@contextmanager
def use_db_session() -> Generator[Session, None, None]:
    """
    Context manager to use a database session.
    """
    db_session = get_session_factory()()
    try:
        yield db_session
    finally:
        close_db_session(db_session)


def close_db_session(db_session: Session) -> None:
    """
    Close a database session.

    Args:
        db_session: Database session to close
    """
    try:
        db_session.close()
    except Exception as e:
        log.error(f"Error closing database session: {e}")
