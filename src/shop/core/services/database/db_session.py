"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlmodel import Session, create_engine

from src.shop.core.errors import ConnectionFailed, QueryFailed
from src.shop.runtime.config.config_data import ConfigData
from src.shop.runtime.context import get_config


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DbSessionService:
    """Owns the pooled engine and hands out one session per unit of work."""

    def __init__(self, engine: Engine | None = None):
        """Initialize the shared database engine and session factory.

        Args:
            engine: Pre-built engine, used by tests to run against in-memory
                SQLite. When omitted the engine is built from configuration.
        """
        if engine is None:
            engine = self._create_engine(get_config())
        self._engine = engine

        if self._engine.dialect.name == "sqlite":
            event.listen(self._engine, "connect", _enable_sqlite_foreign_keys)

    @property
    def engine(self) -> Engine:
        return self._engine

    def _create_engine(self, main_config: ConfigData) -> Engine:
        logger.info("Setting up database engine and session factory")
        db_config = main_config.database

        logger.info("Configuring database engine for environment: {}", main_config.app.environment)
        engine_kwargs = {
            # Connection pool settings
            "pool_size": db_config.pool_size,
            "max_overflow": db_config.max_overflow,
            "pool_timeout": db_config.pool_timeout,
            "pool_recycle": db_config.pool_recycle,
            "pool_pre_ping": True,  # Validate connections before use
            "pool_reset_on_return": "rollback",
            # Set echo to True only when debugging specific SQL issues
            "echo": False,
            "echo_pool": False,
            "connect_args": self._get_connect_args(main_config),
        }

        logger.info("Initializing database engine with pool size {}", db_config.pool_size)
        engine = create_engine(db_config.connection_string, **engine_kwargs)

        if main_config.app.environment == "production":
            logger.info(
                "Database engine initialized",
                pool_size=db_config.pool_size,
                max_overflow=db_config.max_overflow,
                pool_timeout=db_config.pool_timeout,
                pool_recycle=db_config.pool_recycle,
            )
        return engine

    def _get_connect_args(self, config: ConfigData) -> dict:
        """Get database-specific connection arguments."""
        connect_args = {}

        if config.database.url.startswith("postgresql"):
            connect_args.update(
                {
                    # Application name for connection tracking
                    "application_name": f"{config.app.environment}_shop_api",
                    "connect_timeout": 30,
                    # psycopg2 takes server settings through 'options'
                    "options": "-c jit=off",
                }
            )

        elif config.database.is_sqlite:
            connect_args.update(
                {
                    "check_same_thread": False,  # sessions move between worker threads
                    "timeout": 20,  # Lock timeout
                }
            )

            if config.app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )

        return connect_args

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,  # Entities are mapped after commit
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Run one unit of work on a pooled connection.

        Checks a connection out of the pool, yields a session bound to an open
        transaction, commits when the block completes and rolls back on any
        error before re-raising it. SQLAlchemy failures are translated into
        ``ConnectionFailed`` (checkout or broken connection) and
        ``QueryFailed`` (statement or commit failure).
        """
        db = self.get_session()
        try:
            db.connection()
        except SQLAlchemyError as e:
            db.close()
            logger.error(
                "Database connection checkout failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise ConnectionFailed("Database connection failed") from e

        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            self._rollback(db)
            logger.error(
                "Database transaction failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            if isinstance(e, DBAPIError) and e.connection_invalidated:
                raise ConnectionFailed("Database connection lost") from e
            raise QueryFailed("Database query failed") from e
        except Exception as e:
            self._rollback(db)
            logger.error(
                "Database transaction rolled back",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        finally:
            db.close()

    def _rollback(self, db: Session) -> None:
        # a failed rollback must not hide the error that triggered it
        try:
            db.rollback()
        except SQLAlchemyError as e:
            logger.opt(exception=True).warning(
                "Rollback failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def get_pool_status(self) -> dict:
        """Get current connection pool status for monitoring."""
        pool = self._engine.pool
        return {
            "size": getattr(pool, "size", lambda: 0)(),
            "checked_in": getattr(pool, "checkedin", lambda: 0)(),
            "checked_out": getattr(pool, "checkedout", lambda: 0)(),
            "overflow": getattr(pool, "overflow", lambda: 0)(),
        }

    def dispose(self) -> None:
        """Close every pooled connection."""
        self._engine.dispose()
