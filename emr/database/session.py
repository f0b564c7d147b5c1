"""
Database Session Management
============================

Handles database connections and session lifecycle.

A session is one unit of work. Code that reads or writes encounters is handed
a session (or a store built on one) explicitly; nothing here hands out a
thread-bound "current" session.
"""

import os
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from emr.config import settings
from emr.models import base as models_base


def create_db_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Create and configure a database engine.

    Args:
        database_url: SQLAlchemy URL (defaults to settings.database_url)
        echo: Log emitted SQL (defaults to settings.app_debug)
    """
    database_url = database_url or settings.database_url
    echo = settings.app_debug if echo is None else echo

    if database_url.startswith("sqlite"):
        # Ensure data directory exists
        if ":///" in database_url:
            db_path = database_url.split(":///")[1]
            if not db_path.startswith(":memory:"):
                db_dir = os.path.dirname(db_path)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)

        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo
        )

        # Enable foreign keys and WAL mode for SQLite
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    else:
        engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

    return engine


def create_session_factory(engine_instance: Engine) -> sessionmaker:
    """Build a session factory bound to an engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine_instance)


# Create global engine and session factory
engine = create_db_engine()
SessionLocal = create_session_factory(engine)


@contextmanager
def get_db_context(session_factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """
    Context manager for one unit of work.

    Commits when the block exits normally, rolls back on any exception and
    always closes the session.

    Usage:
        with get_db_context() as db:
            repo = EncounterRepository(SqlAlchemyRecordStore(db))
            repo.save_encounter(encounter)
    """
    db = (session_factory or SessionLocal)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """
    Generator dependency yielding a session that is closed afterwards.

    The caller decides when to commit.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_all_tables(engine_instance: Optional[Engine] = None) -> None:
    """Create all tables in the database."""
    models_base.create_all_tables(engine_instance or engine)


def drop_all_tables(engine_instance: Optional[Engine] = None) -> None:
    """Drop all tables in the database."""
    models_base.drop_all_tables(engine_instance or engine)
