"""Latency comparison of the EAV and the denormalized audience schema."""

from .base_measurement import (
    ComparisonResult,
    ExtrapolationResult,
    Measurement,
    QueryScenario,
    SchemaVariant,
)
from .extrapolation import extrapolate
from .report import BenchmarkReport, ReportRenderer
from .runner import MeasurementRunner

__all__ = [
    "BenchmarkReport",
    "ComparisonResult",
    "ExtrapolationResult",
    "Measurement",
    "MeasurementRunner",
    "QueryScenario",
    "ReportRenderer",
    "SchemaVariant",
    "extrapolate",
]
