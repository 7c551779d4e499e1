from dataclasses import dataclass
from enum import Enum
from typing import Optional

from database.exceptions import QueryExecutionError


class SchemaVariant(str, Enum):
    """The two schema designs being compared."""

    BASELINE = "EAV"
    OPTIMIZED = "optimized"


@dataclass(frozen=True)
class QueryScenario:
    """One audience predicate expressed against both schemas.

    Both queries must count the same set of users. The EAV side needs
    DISTINCT because a user may carry duplicate attribute rows.
    """

    name: str
    description: str
    baseline_query: str
    optimized_query: str

    def query_for(self, variant: SchemaVariant) -> str:
        if variant is SchemaVariant.BASELINE:
            return self.baseline_query
        return self.optimized_query


@dataclass(frozen=True)
class Measurement:
    """Outcome of executing one query string."""

    count: Optional[int]
    duration: float
    error: Optional[QueryExecutionError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.count is not None


@dataclass(frozen=True)
class ComparisonResult:
    """Baseline and optimized measurements of one scenario."""

    scenario: QueryScenario
    baseline: Measurement
    optimized: Measurement

    @property
    def speedup(self) -> Optional[float]:
        """Baseline duration / optimized duration, None when undefined."""
        if not (self.baseline.succeeded and self.optimized.succeeded):
            return None
        if self.baseline.duration <= 0 or self.optimized.duration <= 0:
            return None
        return self.baseline.duration / self.optimized.duration

    @property
    def counts_match(self) -> Optional[bool]:
        if not (self.baseline.succeeded and self.optimized.succeeded):
            return None
        return self.baseline.count == self.optimized.count


@dataclass(frozen=True)
class ExtrapolationResult:
    """Linear projection of one measured duration to a larger dataset."""

    measured_duration: float
    measured_users: int
    target_users: int
    projected_duration: float
    budget: float

    @property
    def passed(self) -> bool:
        return self.projected_duration < self.budget
