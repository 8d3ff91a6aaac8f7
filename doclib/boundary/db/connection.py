"""
Database connection management.

Provides the SQLite engine with the vector extension and per-connection
pragmas, and the session factory used by the index store.

Dependencies: sqlalchemy, sqlite-vec
System role: Database connection lifecycle management
"""

import logging
from pathlib import Path

import sqlite_vec
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

logger = logging.getLogger(__name__)


def create_sqlite_engine(
    db_path: str | Path,
    busy_timeout_ms: int = 30000,
    echo: bool = False,
) -> Engine:
    """
    Create SQLAlchemy engine for a SQLite library file.

    Every new DBAPI connection loads the sqlite-vec extension and gets
    WAL journaling, foreign key enforcement (required for ON DELETE
    CASCADE) and a busy timeout.

    Args:
        db_path: SQLite database file; parent directories are created
        busy_timeout_ms: How long a writer waits on a locked database
        echo: Log emitted SQL

    Returns:
        Engine: Configured SQLAlchemy engine

    Usage:
        engine = create_sqlite_engine("~/Documents/.pdf-library/library.db")
    """
    path = Path(db_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        f"sqlite:///{path}",
        echo=echo,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _prepare_connection(dbapi_connection, connection_record):
        dbapi_connection.enable_load_extension(True)
        sqlite_vec.load(dbapi_connection)
        dbapi_connection.enable_load_extension(False)

        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
        cursor.close()

    logger.info(f"{__name__}:create_sqlite_engine - Opened library database at {path}")
    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    """
    Create session factory for database operations.

    autoflush=False and expire_on_commit=False keep loaded rows usable
    after the transaction that produced them has closed.

    Args:
        engine: Engine from create_sqlite_engine

    Returns:
        sessionmaker: Session factory configured for manual transaction control

    Usage:
        SessionFactory = get_session_factory(engine)
        with SessionFactory.begin() as session:
            session.add(obj)
    """
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
