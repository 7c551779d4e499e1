import sys
from dataclasses import dataclass, field
from typing import List, Optional, TextIO

from measurements.base_measurement import ComparisonResult, ExtrapolationResult, Measurement

NOT_AVAILABLE = "n/a"


@dataclass(frozen=True)
class BenchmarkReport:
    """Everything one run produced, ready to be rendered."""

    dataset_size: Optional[int]
    comparisons: List[ComparisonResult]
    average_speedup: Optional[float]
    within_budget: Optional[bool]
    budget: float
    target_users: int
    extrapolation: Optional[ExtrapolationResult] = None
    extrapolation_note: Optional[str] = None
    plan_scenario: Optional[str] = None
    plan_lines: List[str] = field(default_factory=list)
    plan_error: Optional[str] = None
    dataset_error: Optional[str] = None


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.3f}ms"
    return f"{seconds:.3f}s"


def format_speedup(speedup: Optional[float]) -> str:
    if speedup is None:
        return NOT_AVAILABLE
    return f"{speedup:.1f}x"


def format_flag(flag: Optional[bool]) -> str:
    if flag is None:
        return NOT_AVAILABLE
    return "yes" if flag else "no"


class ReportRenderer:
    """Writes a BenchmarkReport as plain text. Touches nothing but the stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def _print(self, line: str = ""):
        print(line, file=self.stream)

    def render(self, report: BenchmarkReport):
        self._print("🚀 Audience Query Benchmark: EAV vs optimized schema")
        self._print("=" * 60)

        if report.dataset_size is None:
            self._print(f"\n📈 Test dataset: unknown ({report.dataset_error})\n")
        else:
            self._print(f"\n📈 Test dataset: {report.dataset_size} users\n")

        for index, result in enumerate(report.comparisons, start=1):
            self._render_comparison(index, result)

        self._render_plan(report)
        self._render_summary(report)

    def _render_comparison(self, index: int, result: ComparisonResult):
        self._print(f"📊 Test {index}: {result.scenario.description}")
        self._print("-" * 50)
        self._print(f"EAV Model:        {self._describe(result.baseline)}")
        self._print(f"Optimized Model:  {self._describe(result.optimized)}")
        if result.counts_match is False:
            self._print("⚠️  Counts differ between models")
        self._print(f"⚡ Speedup:        {format_speedup(result.speedup)}")
        self._print()

    @staticmethod
    def _describe(measurement: Measurement) -> str:
        if not measurement.succeeded:
            return f"failed after {format_duration(measurement.duration)}: {measurement.error}"
        return f"{measurement.count:6d} users in {format_duration(measurement.duration)}"

    def _render_plan(self, report: BenchmarkReport):
        self._print(f"🔍 Query Execution Plan (Optimized Model, {report.plan_scenario}):")
        if report.plan_error:
            self._print(f"   {NOT_AVAILABLE}: {report.plan_error}")
        elif not report.plan_lines:
            self._print(f"   {NOT_AVAILABLE}: no plan produced")
        for line in report.plan_lines:
            self._print(f"   {line}")

    def _render_summary(self, report: BenchmarkReport):
        budget = format_duration(report.budget)
        self._print("\n📈 Summary:")
        self._print("-" * 50)
        dataset = NOT_AVAILABLE if report.dataset_size is None else report.dataset_size
        self._print(f"Dataset size:     {dataset} users")
        self._print(f"Average speedup:  {format_speedup(report.average_speedup)}")
        self._print(f"Measured <{budget}:   {format_flag(report.within_budget)}")

        self._print(
            f"\n🔮 Estimated for {report.target_users} users "
            "(linear extrapolation, an estimate, not a guarantee):"
        )
        extrapolation = report.extrapolation
        if extrapolation is None:
            self._print(f"   Projected:      {NOT_AVAILABLE} ({report.extrapolation_note})")
            self._print(f"   Target <{budget}:  {NOT_AVAILABLE}")
            return
        self._print(f"   Projected:      {format_duration(extrapolation.projected_duration)}")
        verdict = "PASS" if extrapolation.passed else "FAIL"
        self._print(f"   Target <{budget}:  {verdict}")
