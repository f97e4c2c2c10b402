"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Every request gets a session
from get_db().
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from billing_ledger.config import get_settings

settings = get_settings()


def enable_sqlite_savepoints(sqlite_engine: Engine) -> None:
    """
    Let SQLAlchemy manage BEGIN/SAVEPOINT on pysqlite connections.

    The import runs every row in a SAVEPOINT. pysqlite's own
    transaction handling breaks nested transactions, so it is
    switched off and SQLAlchemy emits BEGIN itself.
    """
    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


# --- Engine ---
# pool_pre_ping=True tests connections before using them,
# which handles cases where the database restarted or a
# connection went stale.
connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # FastAPI serves sync endpoints from a threadpool
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)
if engine.dialect.name == "sqlite":
    enable_sqlite_savepoints(engine)

# --- Session Factory ---
# autocommit=False means we explicitly control when changes
# are saved. An import batch is committed once by the caller,
# after every row has been reconciled.
# autoflush=False means SQLAlchemy won't send SQL to the
# database until we explicitly flush or commit.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


# --- Base Model Class ---
# Every database model (Customer, Invoice, LedgerEntry, etc.)
# inherits from this class.
class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, preventing connection leaks.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
