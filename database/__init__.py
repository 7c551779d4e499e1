"""Database configuration and connection handling."""

from .database_config import BenchmarkConfig, DatabaseConfig
from .postgresql_manager import PostgreSQLManager

__all__ = ["BenchmarkConfig", "DatabaseConfig", "PostgreSQLManager"]
