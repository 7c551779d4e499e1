import logging
from dataclasses import asdict
from datetime import datetime
from typing import Dict, List, Optional

from database.database_config import BenchmarkConfig
from database.exceptions import PlanInspectionError, QueryExecutionError
from database.postgresql_manager import PostgreSQLManager
from measurements.audience_queries import build_scenarios
from measurements.base_measurement import ComparisonResult, Measurement, QueryScenario
from measurements.comparison import ComparisonEngine, average_speedup
from measurements.executor import TimedQueryExecutor
from measurements.extrapolation import extrapolate
from measurements.plan_inspector import PlanInspector
from measurements.report import BenchmarkReport

logger = logging.getLogger(__name__)


class MeasurementRunner:
    """Runs all comparisons and assembles the report."""

    def __init__(
        self,
        db_manager: PostgreSQLManager,
        config: Optional[BenchmarkConfig] = None,
        plan_inspector: Optional[PlanInspector] = None,
    ):
        self.db_manager = db_manager
        self.config = config or BenchmarkConfig()
        self.scenarios = build_scenarios(db_manager.config)
        self.executor = TimedQueryExecutor(
            db_manager, statement_timeout=self.config.STATEMENT_TIMEOUT_SECONDS
        )
        self.comparison_engine = ComparisonEngine(
            self.executor, samples=self.config.SAMPLES, warmup=self.config.WARMUP_RUNS
        )
        self.plan_inspector = plan_inspector or PlanInspector(db_manager)

        for name in (self.config.PLAN_SCENARIO, self.config.EXTRAPOLATION_SCENARIO):
            self._scenario(name)

    def _scenario(self, name: str) -> QueryScenario:
        for scenario in self.scenarios:
            if scenario.name == name:
                return scenario
        raise ValueError(f"Unknown scenario: {name}")

    def run_all_tests(self) -> List[ComparisonResult]:
        """Run all scenarios sequentially."""
        logger.info(
            f"Starting measurement suite: {len(self.scenarios)} scenarios, "
            f"{self.config.SAMPLES} sample(s), {self.config.WARMUP_RUNS} warm-up run(s)"
        )
        return self.comparison_engine.compare_all(self.scenarios)

    def inspect_plan(self):
        """Plan of the optimized query, as (lines, error message)."""
        scenario = self._scenario(self.config.PLAN_SCENARIO)
        try:
            return list(self.plan_inspector.explain(scenario.optimized_query)), None
        except PlanInspectionError as e:
            logger.warning(f"Skipping query plan: {e}")
            return [], str(e)

    def run(self) -> BenchmarkReport:
        """Measure, explain and extrapolate. Expects a connected manager."""
        dataset_size, dataset_error = None, None
        try:
            dataset_size = self.db_manager.count_entities()
            logger.info(f"Test dataset: {dataset_size} users")
        except QueryExecutionError as e:
            logger.error(str(e))
            dataset_error = str(e)

        results = self.run_all_tests()
        plan_lines, plan_error = self.inspect_plan()

        extrapolation, note = None, None
        measured = self._extrapolated_measurement(results)
        if measured is None:
            note = f"{self.config.EXTRAPOLATION_SCENARIO} optimized query failed"
        elif not dataset_size:
            note = "dataset size unknown" if dataset_size is None else "dataset is empty"
        else:
            extrapolation = extrapolate(
                measured.duration,
                dataset_size,
                self.config.TARGET_USERS,
                budget=self.config.LATENCY_BUDGET_SECONDS,
            )
        if note:
            logger.warning(f"No extrapolation: {note}")

        return BenchmarkReport(
            dataset_size=dataset_size,
            dataset_error=dataset_error,
            comparisons=results,
            average_speedup=average_speedup(results),
            within_budget=self._within_budget(results),
            budget=self.config.LATENCY_BUDGET_SECONDS,
            target_users=self.config.TARGET_USERS,
            extrapolation=extrapolation,
            extrapolation_note=note,
            plan_scenario=self.config.PLAN_SCENARIO,
            plan_lines=plan_lines,
            plan_error=plan_error,
        )

    def _extrapolated_measurement(self, results) -> Optional[Measurement]:
        for result in results:
            if result.scenario.name == self.config.EXTRAPOLATION_SCENARIO:
                return result.optimized if result.optimized.succeeded else None
        raise ValueError(f"Unknown scenario: {self.config.EXTRAPOLATION_SCENARIO}")

    def _within_budget(self, results) -> Optional[bool]:
        """Every optimized arm under budget, None unless all of them succeeded."""
        if not results or not all(r.optimized.succeeded for r in results):
            return None
        return all(
            r.optimized.duration < self.config.LATENCY_BUDGET_SECONDS for r in results
        )

    def generate_report(self, report: BenchmarkReport) -> Dict:
        """Generate a JSON-serialisable version of the report."""
        extrapolation = None
        if report.extrapolation is not None:
            extrapolation = asdict(report.extrapolation)
            extrapolation["passed"] = report.extrapolation.passed

        return {
            "timestamp": datetime.now().isoformat(),
            "dataset_size": report.dataset_size,
            "dataset_error": report.dataset_error,
            "summary": {
                "average_speedup": report.average_speedup,
                "within_budget": report.within_budget,
                "budget_seconds": report.budget,
                "target_users": report.target_users,
            },
            "detailed_results": [
                {
                    "scenario": result.scenario.name,
                    "description": result.scenario.description,
                    "eav_count": result.baseline.count,
                    "eav_time": result.baseline.duration,
                    "eav_error": _error(result.baseline),
                    "optimized_count": result.optimized.count,
                    "optimized_time": result.optimized.duration,
                    "optimized_error": _error(result.optimized),
                    "speedup": result.speedup,
                }
                for result in report.comparisons
            ],
            "query_plan": {
                "scenario": report.plan_scenario,
                "lines": report.plan_lines,
                "error": report.plan_error,
            },
            "extrapolation": extrapolation,
            "extrapolation_note": report.extrapolation_note,
        }


def _error(measurement: Measurement) -> Optional[str]:
    return str(measurement.error) if measurement.error else None
