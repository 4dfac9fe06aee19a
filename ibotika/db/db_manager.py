# ibotika/db/db_manager.py
"""
Database manager focused on connection management and session handling.
Schema migrations are handled separately via Alembic CLI.

Design principles:
- Single responsibility: Connection/session management only
- Fail fast: Invalid configuration crashes on startup
- Explicit over implicit: No magic auto-migrations
"""

import time
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
    AsyncEngine,
)
from sqlalchemy import event, text
from sqlalchemy.pool import Pool
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Any, Optional, Union
from pathlib import Path
from common import DatabaseConfig, logger, request_timer_context_var

_SUPPORTED_URL_PREFIXES = (
    "postgresql+asyncpg://",
    "postgresql+psycopg://",
    "sqlite+aiosqlite://",
)


class DbManager:
    """
    Database connection and session manager.

    Responsibilities:
    - Async engine/connection pool management
    - Session lifecycle management
    - Per-request SQL timing (feeds the request logging middleware)
    - Health checks

    NOT responsible for:
    - Schema creation/migration (use Alembic CLI)

    Usage:
        # Startup
        db_manager = DbManager.from_config(config.database)
        await db_manager.verify_connection()

        # Runtime
        async with db_manager.session() as session:
            result = await session.execute(...)

        # Shutdown
        await db_manager.dispose()
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        pool_pre_ping: bool = True,
        poolclass: Optional[type[Pool]] = None,
        slow_query_threshold: float = 500.0,
        echo: bool = False,
        connect_args: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize database manager.

        Args:
            url: Database URL (with async driver, e.g. postgresql+asyncpg://)
            pool_size: Number of persistent connections
            max_overflow: Additional connections beyond pool_size
            pool_timeout: Seconds to wait for connection from pool
            pool_recycle: Recycle connections after N seconds
            pool_pre_ping: Test connections before using
            poolclass: Explicit pool class (e.g. NullPool); sizing arguments
                are ignored when given
            slow_query_threshold: Milliseconds above which a statement is logged
            echo: Log all SQL statements (use for debugging)
            connect_args: Driver-specific connection arguments (SSL, etc.)
        """
        self._validate_url(url)

        self._config: dict[str, Union[str, int, float]] = {
            "url": url.split("@")[-1],
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
            "pool_recycle": pool_recycle,
            "slow_query_threshold": slow_query_threshold,
        }
        self._slow_query_threshold = slow_query_threshold

        engine_kwargs: dict[str, Any] = {
            "echo": echo,
            "pool_pre_ping": pool_pre_ping,
            "connect_args": connect_args or {},
        }
        if poolclass is not None:
            engine_kwargs["poolclass"] = poolclass
        else:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
            )

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._install_query_timing()
        self._verified = False

        logger.info(
            "DbManager initialized",
            dialect=self.dialect,
            pool=poolclass.__name__ if poolclass else "default",
            pool_size=pool_size,
            pre_ping=pool_pre_ping,
        )

    @classmethod
    def from_config(
        cls,
        config: DatabaseConfig,
        **kwargs: Any,
    ) -> "DbManager":
        """
        Create DbManager from DatabaseConfig with SSL support.

        Example:
            db_manager = DbManager.from_config(config.database)
        """
        connect_args = kwargs.pop("connect_args", {})

        if config.ssl_mode and config.driver.value == "asyncpg":
            connect_args["ssl"] = cls._build_ssl_context(
                config.ssl_mode.value,
                config.ssl_ca_path,
                config.ssl_cert_path,
                config.ssl_key_path,
            )

        return cls(
            url=config.get_connection_url(include_password=True),
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            slow_query_threshold=config.slow_query_threshold,
            connect_args=connect_args,
            **kwargs,
        )

    @staticmethod
    def _build_ssl_context(
        ssl_mode: str,
        ca_path: Optional[Path],
        cert_path: Optional[Path],
        key_path: Optional[Path],
    ) -> Any:
        """asyncpg takes either False or an SSLContext."""
        import ssl as ssl_module

        if ssl_mode == "disable":
            return False

        ssl_context = ssl_module.create_default_context()
        if ssl_mode in ("require", "verify-ca", "verify-full"):
            if ca_path:
                ssl_context.load_verify_locations(cafile=str(ca_path))
            if cert_path and key_path:
                ssl_context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path))

        if ssl_mode == "verify-full":
            ssl_context.check_hostname = True
            ssl_context.verify_mode = ssl_module.CERT_REQUIRED
        elif ssl_mode in ("require", "prefer", "allow"):
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl_module.CERT_NONE
        return ssl_context

    @staticmethod
    def _validate_url(url: str) -> None:
        if not url or not url.startswith(_SUPPORTED_URL_PREFIXES):
            raise ValueError(
                f"Invalid database URL. Expected one of {', '.join(_SUPPORTED_URL_PREFIXES)}"
                f" got: {url[:20]}..."
            )

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def _install_query_timing(self) -> None:
        """
        Record every statement's duration into the current request's timer
        and log statements slower than the configured threshold.
        """
        sync_engine = self.engine.sync_engine

        @event.listens_for(sync_engine, "before_cursor_execute")
        def _before(conn, cursor, statement, parameters, context, executemany):
            conn.info.setdefault("query_start", []).append(time.perf_counter())

        @event.listens_for(sync_engine, "handle_error")
        def _on_error(exception_context):
            # after_cursor_execute never fires for a failed statement
            conn = exception_context.connection
            if conn is not None and conn.info.get("query_start"):
                conn.info["query_start"].pop()

        @event.listens_for(sync_engine, "after_cursor_execute")
        def _after(conn, cursor, statement, parameters, context, executemany):
            elapsed_ms = (time.perf_counter() - conn.info["query_start"].pop()) * 1000

            timer = request_timer_context_var.get()
            if timer is not None:
                timer.add("sql", elapsed_ms)
                timer.add("query_count", 1)

            if elapsed_ms > self._slow_query_threshold:
                logger.warning(
                    "Slow query",
                    duration_ms=round(elapsed_ms, 2),
                    statement=statement[:200],
                )

    async def verify_connection(self) -> None:
        """
        Verify database connection on startup.

        Raises:
            ConnectionError: If connection fails
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            self._verified = True
            logger.info("Database connection verified", dialect=self.dialect)
        except Exception as e:
            logger.error("Database connection failed", error=str(e))
            raise ConnectionError(f"Failed to connect to database: {e}") from e

    async def verify_migrations_current(self) -> str:
        """
        Check that Alembic has been run against this database.

        Returns:
            The current Alembic revision

        Raises:
            RuntimeError: If alembic_version table is missing or empty
        """
        if self.dialect == "sqlite":
            exists_query = (
                "SELECT COUNT(*) FROM sqlite_master "
                "WHERE type = 'table' AND name = 'alembic_version'"
            )
        else:
            exists_query = (
                "SELECT COUNT(*) FROM information_schema.tables "
                "WHERE table_name = 'alembic_version'"
            )

        async with self.engine.connect() as conn:
            table_exists = (await conn.execute(text(exists_query))).scalar()
            if not table_exists:
                raise RuntimeError(
                    "alembic_version table not found. "
                    "Have you run 'alembic upgrade head'?"
                )

            current_version = (
                await conn.execute(text("SELECT version_num FROM alembic_version"))
            ).scalar()

        if not current_version:
            raise RuntimeError("No Alembic revision recorded. Run 'alembic upgrade head'.")

        logger.info("Current migration version", revision=current_version)
        return str(current_version)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a transactional database session.

        Automatically commits on success, rolls back on exception.

        Usage:
            async with db_manager.session() as session:
                appointment = await session.get(Appointment, appointment_id)
                # Commits automatically on exit
        """
        session = self.session_maker()
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error("Session error, rolled back", error=str(e))
            raise
        finally:
            await session.close()

    async def health_check(self) -> dict[str, Any]:
        """
        Connectivity check with round-trip time.

        Example:
            {"healthy": True, "dialect": "postgresql", "response_time_ms": 5.2}
        """
        start = time.perf_counter()

        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            return {"healthy": False, "error": str(e)}

        return {
            "healthy": True,
            "dialect": self.dialect,
            "response_time_ms": round((time.perf_counter() - start) * 1000, 2),
            "pool_status": self.engine.pool.status(),
        }

    async def dispose(self) -> None:
        """
        Dispose of all connections. Call this on application shutdown.
        """
        await self.engine.dispose()
        logger.info("Database connections disposed")

    def get_config_snapshot(self) -> dict[str, Any]:
        """Get current configuration (credentials stripped from the URL)."""
        return self._config.copy()


__all__ = ["DbManager"]
