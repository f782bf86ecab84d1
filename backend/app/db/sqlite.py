"""
ReadTrack SQLite Database Connection
"""
import logging
from typing import Iterator
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from app.core.config import settings
from app.core.exceptions import DatabaseException
from app.db.models import Base

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = f"sqlite:///{settings.SQLITE_DB_FILE}"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    pool_pre_ping=True
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=30000")  # 30sec timeout if busy connection
    cursor.close()

def get_db() -> Iterator[Session]:
    """Get database session dependency."""
    db = SessionLocal()
    try: yield db
    finally: db.close()

def get_session_factory() -> sessionmaker:
    """Session factory dependency for work that outlives a request"""
    return SessionLocal

def initialise_db():
    """Initialise db connections and create tables if they don't exist"""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialised - tables created if they didn't exist")
    except Exception as e:
        raise DatabaseException(f"Failed to initialize database: {str(e)}")

def close_db_connection():
    """Close db connection"""
    try:
        engine.dispose()
        logger.info("Database connection closed")
    except Exception as e:
        logger.error(f"Failed to close database connection: {str(e)}")
