"""Shared fixtures: an in-memory SQLite copy of both audience schemas."""

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from database.database_config import BenchmarkConfig, DatabaseConfig
from database.postgresql_manager import PostgreSQLManager

SQLITE_SCHEMA = [
    "CREATE TABLE users (user_id INTEGER PRIMARY KEY)",
    """CREATE TABLE user_attributes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER REFERENCES users(user_id),
        key VARCHAR(50),
        value TEXT
    )""",
    """CREATE TABLE user_profiles (
        user_id INTEGER PRIMARY KEY,
        country VARCHAR(2),
        tier VARCHAR(20),
        has_purchased BOOLEAN DEFAULT FALSE,
        total_spend NUMERIC DEFAULT 0
    )""",
]

OTHER_COUNTRIES = ["DE", "FR", "JP"]

# Counts produced by synthetic_users(100)
EXPECTED_COUNTS = {
    "country_us": 40,
    "country_us_or_premium_tier": 60,
    "purchased_high_spender": 15,
}


def synthetic_users(num_users):
    """Deterministic users: 40% in the US, 20% gold or platinum, 25% buyers.

    Spend is 2.5 per user id, user 40 sits right on the 100 threshold once
    rounded to cents.
    """
    users = []
    for i in range(1, num_users + 1):
        if i % 5 in (0, 1):
            country = "US"
        else:
            country = OTHER_COUNTRIES[i % 3]
        tier = {2: "gold", 3: "platinum"}.get(i % 10, "free")
        spend = "100.001" if i == 40 else f"{i * 2.5:.3f}"
        users.append(
            {
                "user_id": i,
                "country": country,
                "tier": tier,
                "has_purchased": i % 4 == 0,
                "total_spend": spend,
            }
        )
    return users


def seed(conn, users):
    for user in users:
        conn.execute(text("INSERT INTO users (user_id) VALUES (:user_id)"), user)
        for key in ("country", "tier", "has_purchased", "total_spend"):
            value = user[key]
            if isinstance(value, bool):
                value = "true" if value else "false"
            conn.execute(
                text(
                    "INSERT INTO user_attributes (user_id, key, value) "
                    "VALUES (:user_id, :key, :value)"
                ),
                {"user_id": user["user_id"], "key": key, "value": value},
            )
        conn.execute(
            text(
                "INSERT INTO user_profiles "
                "(user_id, country, tier, has_purchased, total_spend) "
                "VALUES (:user_id, :country, :tier, :has_purchased, :total_spend)"
            ),
            {**user, "total_spend": round(float(user["total_spend"]), 2)},
        )

    # A duplicated attribute row must not be counted twice on the EAV side
    conn.execute(
        text("INSERT INTO user_attributes (user_id, key, value) VALUES (1, 'country', 'US')")
    )


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        for statement in SQLITE_SCHEMA:
            conn.execute(text(statement))
        seed(conn, synthetic_users(100))
    yield engine
    engine.dispose()


@pytest.fixture
def db_config():
    return DatabaseConfig()


@pytest.fixture
def bench_config():
    return BenchmarkConfig(
        TARGET_USERS=10000000,
        LATENCY_BUDGET_SECONDS=2.0,
        SAMPLES=1,
        WARMUP_RUNS=0,
        STATEMENT_TIMEOUT_SECONDS=None,
    )


@pytest.fixture
def db_manager(db_config, sqlite_engine):
    return PostgreSQLManager(db_config, engine=sqlite_engine)
