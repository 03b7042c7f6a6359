"""
Database engine, session factory and declarative base
"""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.config import settings

Base = declarative_base()

# SQLSTATE codes Postgres uses for lock waits, deadlocks and serialization aborts
LOCK_CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}


def create_db_engine(database_url: str) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL

    SQLite has no row locks, so every transaction is opened with
    BEGIN IMMEDIATE; writers then serialize on the database lock the same
    way SELECT ... FOR UPDATE serializes them on Postgres.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False, "timeout": 30}
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def is_lock_conflict(error: OperationalError) -> bool:
    """Tell whether a database error was caused by lock contention"""
    orig = getattr(error, "orig", None)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in LOCK_CONFLICT_SQLSTATES:
        return True
    message = str(orig or error).lower()
    return "database is locked" in message or "deadlock" in message


engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency yielding a database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None):
    """Create all tables"""
    # Import models so they register on Base.metadata
    from storefront import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
