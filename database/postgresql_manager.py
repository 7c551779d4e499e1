import logging
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from database.database_config import DatabaseConfig
from database.exceptions import DatabaseConnectionError, QueryExecutionError

logger = logging.getLogger(__name__)


class PostgreSQLManager:
    """Handles the pooled PostgreSQL connection used by the benchmark."""

    def __init__(self, config: DatabaseConfig, engine: Optional[Engine] = None):
        self.config = config
        self.url = URL.create(
            "postgresql+psycopg2",
            username=config.PG_DB_USER,
            password=config.PG_DB_PASSWORD or None,
            host=config.PG_DB_HOST,
            port=config.PG_DB_PORT,
            database=config.PG_DB_NAME,
        )
        self._engine = engine
        self.logger = logger

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise DatabaseConnectionError("Not connected, call connect() first")
        return self._engine

    def connect(self) -> Engine:
        """Create the connection pool and verify the server answers."""
        if self._engine is None:
            try:
                self._engine = create_engine(
                    self.url,
                    pool_size=self.config.PG_POOL_MAX_IDLE,
                    max_overflow=self.config.PG_POOL_MAX_OPEN
                    - self.config.PG_POOL_MAX_IDLE,
                    pool_recycle=self.config.PG_POOL_MAX_LIFETIME,
                )
            except (SQLAlchemyError, ImportError) as e:
                self.logger.error(f"Could not create connection pool: {e}")
                raise DatabaseConnectionError(str(e)) from e

        self.ping()
        self.logger.info(
            f"Connected to PostgreSQL database: {self.config.PG_DB_NAME} "
            f"at {self.config.PG_DB_HOST}:{self.config.PG_DB_PORT}"
        )
        return self._engine

    def ping(self):
        """Liveness check, must succeed before anything is measured."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1")).scalar_one()
        except SQLAlchemyError as e:
            self.logger.error(f"Database is not responding: {e}")
            raise DatabaseConnectionError(f"Database is not responding: {e}") from e

    def count_entities(self) -> int:
        """Number of users in the EAV entity table, i.e. the dataset size."""
        query = f"SELECT COUNT(*) FROM {self.config.EAV_ENTITY_TABLE}"
        try:
            with self.engine.connect() as conn:
                return int(conn.execute(text(query)).scalar_one())
        except SQLAlchemyError as e:
            raise QueryExecutionError(f"Counting users failed: {e}") from e

    def dispose(self):
        if self._engine is not None:
            self._engine.dispose()
            self.logger.info("PostgreSQL connection pool closed")
