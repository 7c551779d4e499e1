import os
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from dotenv import load_dotenv

load_dotenv()

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def _from_env(name: str, default, parse: Callable) -> Callable:
    """default_factory reading name from the environment when the config is built."""

    def factory():
        value = os.getenv(name)
        if not value:
            return default
        try:
            return parse(value)
        except ValueError:
            raise ValueError(f"{name} must be a number, got {value!r}") from None

    return factory


@dataclass
class DatabaseConfig:
    # PostgreSQL Configuration
    PG_DB_NAME: str = os.getenv("PG_DB_NAME", "audience_db")
    PG_DB_USER: str = os.getenv("PG_DB_USER", "postgres")
    PG_DB_PASSWORD: str = os.getenv("PG_DB_PASSWORD", "")
    PG_DB_HOST: str = os.getenv("PG_DB_HOST", "localhost")
    PG_DB_PORT: int = field(default_factory=_from_env("PG_DB_PORT", 5432, int))

    # Pool Configuration
    PG_POOL_MAX_OPEN: int = field(default_factory=_from_env("PG_POOL_MAX_OPEN", 25, int))
    PG_POOL_MAX_IDLE: int = field(default_factory=_from_env("PG_POOL_MAX_IDLE", 10, int))
    PG_POOL_MAX_LIFETIME: int = field(
        default_factory=_from_env("PG_POOL_MAX_LIFETIME", 300, int)
    )

    # Schema Names
    EAV_ENTITY_TABLE: str = os.getenv("EAV_ENTITY_TABLE", "users")
    EAV_ATTRIBUTE_TABLE: str = os.getenv("EAV_ATTRIBUTE_TABLE", "user_attributes")
    PROFILE_TABLE: str = os.getenv("PROFILE_TABLE", "user_profiles")

    def __post_init__(self):
        if self.PG_POOL_MAX_IDLE < 1:
            raise ValueError("PG_POOL_MAX_IDLE must be at least 1")
        if self.PG_POOL_MAX_OPEN < self.PG_POOL_MAX_IDLE:
            raise ValueError("PG_POOL_MAX_OPEN must not be lower than PG_POOL_MAX_IDLE")
        if self.PG_POOL_MAX_LIFETIME <= 0:
            raise ValueError("PG_POOL_MAX_LIFETIME must be positive")
        for table in (self.EAV_ENTITY_TABLE, self.EAV_ATTRIBUTE_TABLE, self.PROFILE_TABLE):
            if not _IDENTIFIER.match(table):
                raise ValueError(f"Invalid table name: {table!r}")


@dataclass
class BenchmarkConfig:
    """Knobs of one benchmarking run."""

    TARGET_USERS: int = field(default_factory=_from_env("BENCH_TARGET_USERS", 10000000, int))
    LATENCY_BUDGET_SECONDS: float = field(
        default_factory=_from_env("BENCH_LATENCY_BUDGET_SECONDS", 2.0, float)
    )
    SAMPLES: int = field(default_factory=_from_env("BENCH_SAMPLES", 1, int))
    WARMUP_RUNS: int = field(default_factory=_from_env("BENCH_WARMUP_RUNS", 0, int))
    STATEMENT_TIMEOUT_SECONDS: Optional[float] = field(
        default_factory=_from_env("BENCH_STATEMENT_TIMEOUT_SECONDS", None, float)
    )

    # Scenario whose optimized query is explained and extrapolated
    PLAN_SCENARIO: str = "country_us"
    EXTRAPOLATION_SCENARIO: str = "country_us"

    def __post_init__(self):
        if self.TARGET_USERS <= 0:
            raise ValueError("TARGET_USERS must be positive")
        if self.LATENCY_BUDGET_SECONDS <= 0:
            raise ValueError("LATENCY_BUDGET_SECONDS must be positive")
        if self.SAMPLES < 1:
            raise ValueError("SAMPLES must be at least 1")
        if self.WARMUP_RUNS < 0:
            raise ValueError("WARMUP_RUNS must not be negative")
        if self.STATEMENT_TIMEOUT_SECONDS is not None and self.STATEMENT_TIMEOUT_SECONDS <= 0:
            raise ValueError("STATEMENT_TIMEOUT_SECONDS must be positive")
