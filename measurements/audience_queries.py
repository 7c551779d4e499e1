"""Audience predicates compared between the EAV and the profile schema."""

from typing import List

from database.database_config import DatabaseConfig
from measurements.base_measurement import QueryScenario


def country_us(config: DatabaseConfig) -> QueryScenario:
    return QueryScenario(
        name="country_us",
        description="Simple Query (country = 'US')",
        baseline_query=f"""
            SELECT COUNT(DISTINCT u.user_id)
            FROM {config.EAV_ENTITY_TABLE} u
            WHERE EXISTS (
                SELECT 1 FROM {config.EAV_ATTRIBUTE_TABLE} ua
                WHERE ua.user_id = u.user_id
                AND ua.key = 'country'
                AND ua.value = 'US'
            )""",
        optimized_query=f"""
            SELECT COUNT(*)
            FROM {config.PROFILE_TABLE}
            WHERE country = 'US'""",
    )


def country_us_or_premium_tier(config: DatabaseConfig) -> QueryScenario:
    return QueryScenario(
        name="country_us_or_premium_tier",
        description="Complex OR Query (country = 'US' OR tier IN ('gold', 'platinum'))",
        baseline_query=f"""
            SELECT COUNT(DISTINCT u.user_id)
            FROM {config.EAV_ENTITY_TABLE} u
            WHERE EXISTS (
                SELECT 1 FROM {config.EAV_ATTRIBUTE_TABLE} ua1
                WHERE ua1.user_id = u.user_id
                AND ua1.key = 'country'
                AND ua1.value = 'US'
            )
            OR EXISTS (
                SELECT 1 FROM {config.EAV_ATTRIBUTE_TABLE} ua2
                WHERE ua2.user_id = u.user_id
                AND ua2.key = 'tier'
                AND ua2.value IN ('gold', 'platinum')
            )""",
        optimized_query=f"""
            SELECT COUNT(*)
            FROM {config.PROFILE_TABLE}
            WHERE country = 'US'
               OR tier IN ('gold', 'platinum')""",
    )


def purchased_high_spender(config: DatabaseConfig) -> QueryScenario:
    # The CASE keeps the cast away from rows of other attributes. Amounts are
    # rounded like the DECIMAL(10,2) column of the profile table.
    return QueryScenario(
        name="purchased_high_spender",
        description="Complex AND Query (has_purchased AND total_spend > 100)",
        baseline_query=f"""
            SELECT COUNT(DISTINCT u.user_id)
            FROM {config.EAV_ENTITY_TABLE} u
            WHERE EXISTS (
                SELECT 1 FROM {config.EAV_ATTRIBUTE_TABLE} ua1
                WHERE ua1.user_id = u.user_id
                AND ua1.key = 'has_purchased'
                AND ua1.value = 'true'
            )
            AND EXISTS (
                SELECT 1 FROM {config.EAV_ATTRIBUTE_TABLE} ua2
                WHERE ua2.user_id = u.user_id
                AND ua2.key = 'total_spend'
                AND CASE WHEN ua2.key = 'total_spend'
                         THEN ROUND(CAST(ua2.value AS NUMERIC), 2)
                    END > 100
            )""",
        optimized_query=f"""
            SELECT COUNT(*)
            FROM {config.PROFILE_TABLE}
            WHERE has_purchased = TRUE
              AND total_spend > 100""",
    )


def build_scenarios(config: DatabaseConfig) -> List[QueryScenario]:
    """All scenarios in the order they are measured."""
    return [
        country_us(config),
        country_us_or_premium_tier(config),
        purchased_high_spender(config),
    ]
