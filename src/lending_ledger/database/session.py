"""
Database session management for the Lending Ledger.

Every ledger mutation must run inside one database transaction, so this
module centralises:

1. Engine creation (SQLite by default, any SQLAlchemy URL otherwise)
2. Transaction scopes that commit on success and roll back on failure
3. Schema initialisation and connection health checks
"""

import logging
from collections.abc import Callable, Generator
from typing import TypeVar
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from .schema import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Seconds a SQLite writer waits for a competing writer before giving up
SQLITE_BUSY_TIMEOUT = 30


class DatabaseManager:
    """
    Manages database connections and sessions.

    This class provides:
    - Lazy engine creation with backend-specific settings
    - A session factory with explicit transactions
    - Schema creation for development and tests
    """

    def __init__(self, database_url: str | None = None):
        """
        Initialize the database manager.

        Args:
            database_url: SQLAlchemy database URL. If None, the configured URL is used.
        """
        if database_url is None:
            database_url = get_config().get_database_url()
            logger.info("Using configured database: %s", database_url)

        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        url = self.database_url
        return self.is_sqlite and (":memory:" in url or url.endswith("://"))

    @property
    def engine(self) -> Engine:
        """
        Get or create the database engine.

        SQLite connections always run with foreign keys enabled. In-memory
        databases share a single connection (StaticPool); file databases get
        a regular pool so concurrent sessions hold separate transactions.
        """
        if self._engine is None:
            if self.is_sqlite:
                connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT}
                if self.is_memory:
                    self._engine = create_engine(
                        self.database_url,
                        poolclass=StaticPool,
                        connect_args=connect_args,
                        echo=False,
                    )
                else:
                    self._engine = create_engine(
                        self.database_url,
                        connect_args=connect_args,
                        echo=False,
                    )

                @event.listens_for(self._engine, "connect")
                def set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
                    cursor = dbapi_connection.cursor()
                    cursor.execute("PRAGMA foreign_keys=ON")
                    cursor.close()
            else:
                self._engine = create_engine(
                    self.database_url,
                    pool_size=10,
                    max_overflow=20,
                    pool_pre_ping=True,
                    echo=False,
                )

            logger.info("Database engine created: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_session(self) -> Session:
        """
        Create a new database session.

        Callers own the session and must close it; prefer session_scope().
        """
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for database operations.

        ```python
        with db_manager.session_scope() as session:
            LendingLedger(session).issue_book(book_id=1, member_id=1)
        ```

        Yields:
            Database session

        Raises:
            Any error raised inside the block, after rolling back
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
            logger.debug("Database transaction committed successfully")
        except Exception:
            logger.exception("Database error, rolling back")
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self, drop_existing: bool = False) -> None:
        """
        Initialize the database schema.

        Args:
            drop_existing: If True, drop all tables before creating
        """
        engine = self.engine

        if drop_existing:
            logger.warning("Dropping all existing tables...")
            Base.metadata.drop_all(bind=engine)

        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialization complete")

    def verify_connection(self) -> bool:
        """Return True when a trivial query succeeds."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database connection verified")
            return True
        except Exception:
            logger.exception("Database connection failed")
            return False

    def close(self) -> None:
        """Dispose of the engine and forget the session factory."""
        if self._engine:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None


_db_manager: DatabaseManager | None = None


def get_db_manager(database_url: str | None = None) -> DatabaseManager:
    """
    Get the global database manager instance.

    Args:
        database_url: Database URL (only used on first call)
    """
    global _db_manager  # noqa: PLW0603 - Singleton pattern for database manager

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)

    return _db_manager


def reset_db_manager() -> None:
    """Close and drop the global database manager (useful for testing)."""
    global _db_manager  # noqa: PLW0603

    if _db_manager is not None:
        _db_manager.close()
    _db_manager = None


def get_session() -> Session:
    """
    Get a new database session.

    Prefer session_scope() for proper transaction management.
    """
    return get_db_manager().create_session()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Convenience context manager for database sessions.

    Example:
        ```python
        with session_scope() as session:
            books = session.query(Book).all()
        ```
    """
    with get_db_manager().session_scope() as session:
        yield session


def safe_commit(session: Session, operation: str) -> None:
    """
    Commit a session, rolling back on failure.

    Args:
        session: The database session
        operation: Description of the operation (for error messages)

    Raises:
        ValueError: If the commit fails
    """
    try:
        session.commit()
    except Exception as e:
        session.rollback()
        raise ValueError(f"Database operation '{operation}' failed: {e!s}") from e


def safe_query(session: Session, query_func: Callable[[Session], T], error_msg: str) -> T:
    """
    Execute a query, logging and wrapping database failures.

    Args:
        session: The database session
        query_func: Function that performs the query
        error_msg: Error message prefix

    Raises:
        ValueError: If the query fails
    """
    try:
        return query_func(session)
    except Exception as e:
        logger.exception("Query failed")
        raise ValueError(f"{error_msg}: Database query failed") from e
