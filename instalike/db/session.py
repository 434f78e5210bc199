from typing import Generator
import logging

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

# Base class for all SQLAlchemy models
Base = declarative_base()


def _apply_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    # SQLite ships with foreign keys disabled; cascades depend on them
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str) -> Engine:
    """Create the engine for the configured database URL"""
    if not database_url:
        logger.error("DATABASE_URL is not set or empty!")
        raise ValueError("DATABASE_URL is required")

    logger.info(f"Connecting to database with URL: {database_url}")
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            # Sessions are used from FastAPI's threadpool
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        event.listen(engine, "connect", _apply_sqlite_pragmas)
    else:
        engine = create_engine(
            database_url,
            pool_pre_ping=True,  # Check connection before using from pool
            pool_recycle=3600,   # Recycle connections after 1 hour
        )
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Database session dependency for FastAPI
def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.SessionLocal()
    try:
        yield db
    finally:
        db.close()
