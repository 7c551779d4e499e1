"""Failures raised while talking to the benchmarked database."""

from typing import Optional


class BenchmarkError(Exception):
    """Base class for all harness errors."""


class DatabaseConnectionError(BenchmarkError):
    """The database could not be reached. Fatal for the whole run."""


class QueryExecutionError(BenchmarkError):
    """A single measured query failed.

    Carries the scenario and schema variant it belongs to so the report can
    say which arm of which comparison broke.
    """

    def __init__(
        self,
        message: str,
        scenario: Optional[str] = None,
        variant: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.scenario = scenario
        self.variant = variant

    def __str__(self) -> str:
        context = [part for part in (self.scenario, self.variant) if part]
        if context:
            return f"[{'/'.join(context)}] {self.message}"
        return self.message


class PlanInspectionError(BenchmarkError):
    """EXPLAIN of a query failed. Diagnostic only, never escalated."""
