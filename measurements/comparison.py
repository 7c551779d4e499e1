import logging
from typing import Iterable, List, Optional

from measurements.base_measurement import ComparisonResult, QueryScenario, SchemaVariant
from measurements.executor import TimedQueryExecutor

logger = logging.getLogger(__name__)


class ComparisonEngine:
    """Runs every scenario against both schemas, one query at a time."""

    def __init__(self, executor: TimedQueryExecutor, samples: int = 1, warmup: int = 0):
        self.executor = executor
        self.samples = samples
        self.warmup = warmup

    def compare(self, scenario: QueryScenario) -> ComparisonResult:
        """Measure the EAV query first, then the optimized one.

        A failing baseline does not stop the optimized arm from running.
        """
        logger.info(f"Running scenario: {scenario.name}")
        measurements = {}
        for variant in (SchemaVariant.BASELINE, SchemaVariant.OPTIMIZED):
            measurements[variant] = self.executor.sample(
                scenario.query_for(variant),
                runs=self.samples,
                warmup=self.warmup,
                scenario=scenario.name,
                variant=variant.value,
            )

        result = ComparisonResult(
            scenario=scenario,
            baseline=measurements[SchemaVariant.BASELINE],
            optimized=measurements[SchemaVariant.OPTIMIZED],
        )

        if result.counts_match is False:
            logger.warning(
                f"{scenario.name}: EAV counted {result.baseline.count} users, "
                f"optimized counted {result.optimized.count}"
            )
        if result.speedup is not None:
            logger.info(f"✅ {scenario.name}: {result.speedup:.1f}x faster")
        return result

    def compare_all(self, scenarios: Iterable[QueryScenario]) -> List[ComparisonResult]:
        return [self.compare(scenario) for scenario in scenarios]


def average_speedup(results: Iterable[ComparisonResult]) -> Optional[float]:
    """Summed baseline time over summed optimized time.

    Only scenarios with a defined speedup take part. None when there are none.
    """
    defined = [r for r in results if r.speedup is not None]
    if not defined:
        return None
    baseline_total = sum(r.baseline.duration for r in defined)
    optimized_total = sum(r.optimized.duration for r in defined)
    return baseline_total / optimized_total
