"""
Database engine and session management
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ...domain.exceptions import StorageError
from ..configuration.config import get_config
from ..logging.logger_config import PerformanceLogger
from ..utilities.constants import DatabaseSettings, LoggingSettings
from .models import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Database manager owning the engine and the session factory"""

    def __init__(self, config: Optional[Any] = None, database_url: Optional[str] = None):
        self.config = config or get_config()
        self.database_url = database_url or self.config.database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self.logger = logging.getLogger(__name__)

    def get_engine(self) -> Engine:
        """Get database engine with proper configuration"""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        """Create database engine with environment-specific settings"""
        engine_kwargs: Dict[str, Any] = {"pool_pre_ping": True}

        if self.database_url.startswith("sqlite"):
            self._ensure_sqlite_directory()
            engine_kwargs.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })
        elif self.config.environment == "production":
            engine_kwargs.update({
                "pool_size": DatabaseSettings.PRODUCTION_POOL_SIZE,
                "max_overflow": DatabaseSettings.PRODUCTION_MAX_OVERFLOW,
                "pool_recycle": DatabaseSettings.POOL_RECYCLE_SECONDS,
            })
        else:
            engine_kwargs.update({
                "pool_size": DatabaseSettings.DEFAULT_POOL_SIZE,
                "max_overflow": DatabaseSettings.MAX_POOL_OVERFLOW,
                "pool_recycle": DatabaseSettings.POOL_RECYCLE_SECONDS,
            })

        engine = create_engine(self.database_url, **engine_kwargs)
        self._setup_engine_events(engine)
        return engine

    def _ensure_sqlite_directory(self) -> None:
        database = make_url(self.database_url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    def _setup_engine_events(self, engine: Engine) -> None:
        """Log slow statements"""

        @event.listens_for(engine, "before_cursor_execute")
        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):  # pylint: disable=unused-argument
            context._query_start_time = time.perf_counter()

        @event.listens_for(engine, "after_cursor_execute")
        def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):  # pylint: disable=unused-argument
            total_time_ms = (time.perf_counter() - context._query_start_time) * 1000
            if total_time_ms > LoggingSettings.SLOW_OPERATION_THRESHOLD_MS:
                self.logger.warning(
                    "Slow query detected (%.1fms): %s",
                    total_time_ms,
                    statement[:200],
                    extra={"operation_time": total_time_ms},
                )

    def get_session_factory(self) -> sessionmaker:
        """Get session factory"""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.get_engine(),
                expire_on_commit=False
            )
        return self._session_factory

    def get_session(self) -> Session:
        """Get database session"""
        return self.get_session_factory()()

    def create_tables(self) -> None:
        """Create all database tables"""
        try:
            with PerformanceLogger("create_tables", self.logger):
                Base.metadata.create_all(self.get_engine())
                self.logger.info("Database tables created successfully")
        except SQLAlchemyError as e:
            self.logger.error("Failed to create database tables: %s", e, exc_info=True)
            raise StorageError(
                f"Failed to create database tables: {e}", "create_tables"
            ) from e

    def health_check(self) -> Dict[str, Any]:
        """Perform database health check"""
        try:
            with self.get_session() as session:
                result = session.execute(text("SELECT 1")).scalar()
            if result == 1:
                return {"status": "healthy", "environment": self.config.environment}
            return {
                "status": "unhealthy",
                "error": "Health check query returned unexpected result",
            }
        except SQLAlchemyError as e:
            self.logger.error("Database health check failed: %s", e)
            return {"status": "unhealthy", "error": str(e)}

    def close(self) -> None:
        """Close database connections"""
        if self._engine:
            self._engine.dispose()
            self._engine = None
        self._session_factory = None
        self.logger.info("Database connections closed")

