from unittest.mock import MagicMock

import pytest

from database.exceptions import QueryExecutionError
from measurements.audience_queries import build_scenarios
from measurements.base_measurement import (
    ComparisonResult,
    Measurement,
    QueryScenario,
    SchemaVariant,
)
from measurements.comparison import ComparisonEngine, average_speedup
from measurements.executor import TimedQueryExecutor

from .conftest import EXPECTED_COUNTS

SCENARIO = QueryScenario("s", "scenario", "SELECT eav", "SELECT optimized")


def failed(duration=0.1):
    return Measurement(None, duration, QueryExecutionError("boom"))


class TestSpeedup:
    """Tests for the derived speedup ratio."""

    def test_ratio_of_durations(self):
        result = ComparisonResult(SCENARIO, Measurement(40, 0.9), Measurement(40, 0.03))
        assert result.speedup == pytest.approx(0.9 / 0.03)

    @pytest.mark.parametrize(
        "baseline,optimized",
        [
            (failed(), Measurement(40, 0.03)),
            (Measurement(40, 0.9), failed()),
            (failed(), failed()),
            (Measurement(40, 0.9), Measurement(40, 0.0)),
            (Measurement(40, 0.0), Measurement(40, 0.03)),
        ],
    )
    def test_undefined_speedup(self, baseline, optimized):
        assert ComparisonResult(SCENARIO, baseline, optimized).speedup is None

    def test_counts_match(self):
        assert ComparisonResult(SCENARIO, Measurement(1, 1), Measurement(1, 1)).counts_match
        assert ComparisonResult(SCENARIO, Measurement(1, 1), Measurement(2, 1)).counts_match is False
        assert ComparisonResult(SCENARIO, failed(), Measurement(2, 1)).counts_match is None


class TestComparisonEngine:
    """Tests for running both arms of a scenario."""

    def test_baseline_runs_before_optimized(self):
        executor = MagicMock()
        executor.sample.return_value = Measurement(1, 0.1)
        ComparisonEngine(executor).compare(SCENARIO)

        queries = [c.args[0] for c in executor.sample.call_args_list]
        variants = [c.kwargs["variant"] for c in executor.sample.call_args_list]
        assert queries == ["SELECT eav", "SELECT optimized"]
        assert variants == [SchemaVariant.BASELINE.value, SchemaVariant.OPTIMIZED.value]

    def test_failed_baseline_still_runs_optimized(self):
        executor = MagicMock()
        executor.sample.side_effect = [failed(), Measurement(40, 0.01)]
        result = ComparisonEngine(executor).compare(SCENARIO)

        assert executor.sample.call_count == 2
        assert result.optimized.count == 40
        assert result.speedup is None

    def test_sampling_settings_forwarded(self):
        executor = MagicMock()
        executor.sample.return_value = Measurement(1, 0.1)
        ComparisonEngine(executor, samples=5, warmup=2).compare(SCENARIO)
        assert executor.sample.call_args.kwargs["runs"] == 5
        assert executor.sample.call_args.kwargs["warmup"] == 2

    def test_both_schemas_count_the_same_users(self, db_manager, db_config):
        engine = ComparisonEngine(TimedQueryExecutor(db_manager))
        results = engine.compare_all(build_scenarios(db_config))

        assert [r.scenario.name for r in results] == list(EXPECTED_COUNTS)
        for result in results:
            expected = EXPECTED_COUNTS[result.scenario.name]
            assert result.baseline.count == expected
            assert result.optimized.count == expected

    def test_repeated_comparison_gives_same_counts(self, db_manager, db_config):
        engine = ComparisonEngine(TimedQueryExecutor(db_manager))
        scenarios = build_scenarios(db_config)
        first = engine.compare_all(scenarios)
        second = engine.compare_all(scenarios)
        assert [(r.baseline.count, r.optimized.count) for r in first] == [
            (r.baseline.count, r.optimized.count) for r in second
        ]


class TestAverageSpeedup:
    """Tests for the aggregate speedup."""

    def test_summed_durations(self):
        results = [
            ComparisonResult(SCENARIO, Measurement(1, 1.0), Measurement(1, 0.1)),
            ComparisonResult(SCENARIO, Measurement(1, 3.0), Measurement(1, 0.3)),
        ]
        assert average_speedup(results) == pytest.approx(10.0)

    def test_undefined_scenarios_skipped(self):
        results = [
            ComparisonResult(SCENARIO, Measurement(1, 1.0), Measurement(1, 0.5)),
            ComparisonResult(SCENARIO, failed(100.0), Measurement(1, 0.5)),
        ]
        assert average_speedup(results) == pytest.approx(2.0)

    def test_none_defined(self):
        assert average_speedup([ComparisonResult(SCENARIO, failed(), failed())]) is None
        assert average_speedup([]) is None
