from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from polly.core.config import settings
from polly.core.constants import DatabaseConfig


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in database_url


def _enable_sqlite_constraints(engine: Engine) -> None:
    """Make SQLite behave like the production store for our invariants.

    Foreign keys are off by default in SQLite, and its deferred transactions
    can fail with "database is locked" instead of waiting. Every transaction
    therefore starts with BEGIN IMMEDIATE, which serializes writers and lets
    the unique constraints decide concurrent votes.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # let SQLAlchemy's "begin" event emit BEGIN itself
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(database_url: str) -> Engine:
    """Create an engine configured for the given database URL."""
    if database_url.startswith("sqlite"):
        # SQLite specific configuration
        engine_kwargs = {
            "connect_args": {
                "check_same_thread": False,  # Needed for SQLite with FastAPI
                "timeout": DatabaseConfig.POOL_TIMEOUT,
            }
        }
        if _is_memory_sqlite(database_url):
            # every session must see the same in-memory database
            engine_kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, **engine_kwargs)
        _enable_sqlite_constraints(engine)
        return engine

    # PostgreSQL or other databases
    return create_engine(
        database_url,
        pool_size=DatabaseConfig.POOL_SIZE,
        max_overflow=DatabaseConfig.MAX_OVERFLOW,
        pool_timeout=DatabaseConfig.POOL_TIMEOUT,
        pool_recycle=DatabaseConfig.POOL_RECYCLE,
        pool_pre_ping=True,
    )


engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Define the base class for declarative models
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
