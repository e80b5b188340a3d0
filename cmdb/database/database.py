"""
Database connection and session management
"""
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool, QueuePool

from .models import Base
from ..utils.config import DatabaseConfig, load_config
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

# Lazy-loaded engine and session factory
_database_config: Optional[DatabaseConfig] = None
_engine: Optional[Engine] = None
_SessionLocal = None


def configure_database(database_config: DatabaseConfig) -> None:
    """
    Set the database settings used by the next engine creation.

    Disposes any existing engine so the new settings take effect.
    """
    global _database_config
    close_db_connections()
    _database_config = database_config


def _get_database_config() -> DatabaseConfig:
    global _database_config
    if _database_config is None:
        _database_config = load_config().database
    return _database_config


def _ensure_sqlite_directory(url: str) -> None:
    database = make_url(url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def create_db_engine(database_config: DatabaseConfig) -> Engine:
    """
    Build an engine for the configured URL

    Connection pooling:
    - SQLite: StaticPool, one shared connection
    - PostgreSQL and others: QueuePool sized from config
    """
    url = database_config.url

    if url.startswith('sqlite'):
        _ensure_sqlite_directory(url)
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=database_config.echo
        )

        # SQLite leaves foreign keys off unless asked
        @event.listens_for(engine, "connect")
        def enable_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        logger.info("Database engine created: SQLite")
        return engine

    engine = create_engine(
        url,
        pool_size=database_config.pool_size,
        max_overflow=database_config.pool_size * 2,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
        poolclass=QueuePool,
        echo=database_config.echo
    )

    @event.listens_for(engine, "checkout")
    def receive_checkout(dbapi_conn, connection_record, connection_proxy):
        logger.debug("Connection checked out from pool")

    logger.info(f"Database engine created: {engine.dialect.name} (pool_size={database_config.pool_size})")
    return engine


def get_engine() -> Engine:
    """Get or create the process-wide engine"""
    global _engine
    if _engine is None:
        _engine = create_db_engine(_get_database_config())
    return _engine


def get_session_local():
    """Get or create session factory (lazy-loaded)"""
    global _SessionLocal

    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine(),
            expire_on_commit=False
        )

    return _SessionLocal


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables defined in models.py"""
    try:
        Base.metadata.create_all(bind=engine or get_engine())
        logger.info("[OK] Database tables created successfully")
    except Exception as e:
        logger.error(f"[ERROR] Failed to create database tables: {e}", exc_info=True)
        raise


def check_connection(db: Session) -> bool:
    """Round-trip a trivial query; False when the database is unreachable"""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return False


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI

    Usage:
        @router.get("/")
        def endpoint(db: Session = Depends(get_db)):
            return db.query(ConfigurationItem).first()
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def close_db_connections() -> None:
    """
    Close all database connections and dispose engine
    Useful for cleanup in tests or shutdown
    """
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()
        logger.info("Database connections closed")

    _engine = None
    _SessionLocal = None
