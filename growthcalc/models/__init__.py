"""
Growth engine data models.
"""

from .growth import (
    Sex,
    BMICategory,
    Measure,
    Measurement,
    DatedMeasurement,
    CategoryInfo,
    BMIResult,
    TrendPoint,
    MetricSummary,
    TrendSummary,
    GrowthTrend,
)

__all__ = [
    "Sex",
    "BMICategory",
    "Measure",
    "Measurement",
    "DatedMeasurement",
    "CategoryInfo",
    "BMIResult",
    "TrendPoint",
    "MetricSummary",
    "TrendSummary",
    "GrowthTrend",
]
