"""
Database Configuration and Session Management

Async engine and session management with SQLite foreign-key enforcement,
connection health checks and slow query monitoring.
"""

from typing import AsyncGenerator, Optional, Dict, Any
import time
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
    AsyncEngine
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from sqlalchemy import text, event

from destinations.core.config import Settings
from destinations.utils.logger import get_logger
from destinations.utils.metrics import metrics

# Initialize logger
logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""
    pass


class QueryMonitor:
    """Time statements executed on an engine and flag slow ones."""

    def __init__(self, slow_query_threshold: float = 1.0):
        self.slow_query_threshold = slow_query_threshold
        self.stats = {
            'queries': 0,
            'slow_queries': 0,
            'failed_queries': 0,
        }

    def attach(self, engine: AsyncEngine) -> None:
        """Register cursor execution hooks on the engine."""
        event.listen(engine.sync_engine, "before_cursor_execute", self._before_execute)
        event.listen(engine.sync_engine, "after_cursor_execute", self._after_execute)
        event.listen(engine.sync_engine, "handle_error", self._on_error)

    # The start time rides on the per-statement execution context, which is
    # discarded with the statement whether it succeeds or fails
    def _before_execute(self, conn, cursor, statement, parameters, context, executemany):
        if context is not None:
            context._query_start_time = time.perf_counter()

    def _after_execute(self, conn, cursor, statement, parameters, context, executemany):
        started = getattr(context, '_query_start_time', None)
        if started is None:
            return
        duration = time.perf_counter() - started
        statement_type = statement.lstrip().split(" ", 1)[0].upper() or "UNKNOWN"

        self.stats['queries'] += 1
        metrics.record_query(statement_type, duration)

        if duration > self.slow_query_threshold:
            self.stats['slow_queries'] += 1
            logger.warning(
                "Slow query detected",
                duration=round(duration, 3),
                statement=statement_type,
            )

    def _on_error(self, exception_context) -> None:
        self.stats['failed_queries'] += 1
        logger.debug(
            "Query failed",
            error_type=type(exception_context.original_exception).__name__,
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get query statistics."""
        return self.stats.copy()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ships with foreign key enforcement disabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Database connection and session management."""

    def __init__(self, settings: Settings) -> None:
        """Initialize database manager."""
        self.settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._query_monitor = QueryMonitor(settings.SLOW_QUERY_THRESHOLD_SECONDS)

    @property
    def engine(self) -> AsyncEngine:
        """Get database engine."""
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init_database() first.")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get session factory."""
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call init_database() first.")
        return self._session_factory

    @property
    def query_monitor(self) -> QueryMonitor:
        return self._query_monitor

    async def init_database(self) -> None:
        """Initialize database connections."""
        try:
            database_url = self.settings.DATABASE_URL
            engine_kwargs: Dict[str, Any] = {
                "echo": self.settings.DATABASE_ECHO,
            }

            # SQLite-specific configuration
            if self.settings.is_sqlite:
                engine_kwargs["connect_args"] = {"check_same_thread": False}
                if ":memory:" in database_url:
                    # A single shared connection keeps the in-memory database alive
                    engine_kwargs["poolclass"] = StaticPool
            else:
                engine_kwargs["pool_size"] = self.settings.DATABASE_POOL_SIZE
                engine_kwargs["max_overflow"] = self.settings.DATABASE_MAX_OVERFLOW
                engine_kwargs["pool_pre_ping"] = True

            self._engine = create_async_engine(database_url, **engine_kwargs)

            if self.settings.is_sqlite:
                event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
            self._query_monitor.attach(self._engine)

            # Create session factory
            self._session_factory = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            # Test database connection
            await self._test_database_connection()

            logger.info("Database connection initialized successfully")

        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))
            raise

    async def _test_database_connection(self) -> None:
        """Test database connection."""
        try:
            async with self._engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database connection test successful")
        except Exception as e:
            logger.error("Database connection test failed", error=str(e))
            raise

    async def health_check(self) -> bool:
        """Return True when the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database health check failed", error=str(e))
            return False

    async def create_tables(self) -> None:
        """Create database tables."""
        # Model modules must be imported so their tables are registered on Base
        import destinations.models  # noqa: F401

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error("Failed to create database tables", error=str(e))
            raise

    async def close_connections(self) -> None:
        """Close database connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for a database session.

        Commits on success and rolls back on any exception.

        Yields:
            AsyncSession: Database session
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
