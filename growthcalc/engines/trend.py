"""
Growth trend aggregation.

Runs the BMI pipeline over one subject's dated measurements and adds
first / latest / delta summaries for height, weight and BMI.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from growthcalc.engines.calculator import GrowthEngine
from growthcalc.errors import UnorderedSeries
from growthcalc.models import (
    DatedMeasurement,
    GrowthTrend,
    Measure,
    MetricSummary,
    TrendPoint,
    TrendSummary,
)


def _check_order(series: list[DatedMeasurement]) -> None:
    for index in range(1, len(series)):
        if series[index].date < series[index - 1].date:
            raise UnorderedSeries(
                f"Measurement {index} dated {series[index].date} precedes "
                f"measurement {index - 1} dated {series[index - 1].date}"
            )


def _optional_percentile(
    engine: GrowthEngine,
    measure: Measure,
    value: float,
    measurement: DatedMeasurement,
) -> float | None:
    """Height/weight-for-age percentile when that table is loaded."""
    if engine.reference is None or measure not in engine.reference.tables:
        return None
    _, percentile = engine.measure_percentile(measure, value, measurement.age_years, measurement.sex)
    return percentile


def build_point(engine: GrowthEngine, measurement: DatedMeasurement) -> TrendPoint:
    result = engine.evaluate_measurement(measurement)

    height_percentile = weight_percentile = None
    if result.is_child:
        height_percentile = _optional_percentile(engine, Measure.HEIGHT, measurement.height_cm, measurement)
        weight_percentile = _optional_percentile(engine, Measure.WEIGHT, measurement.weight_kg, measurement)

    return TrendPoint(
        date=measurement.date,
        height_cm=measurement.height_cm,
        weight_kg=measurement.weight_kg,
        age_years=measurement.age_years,
        notes=measurement.notes,
        result=result,
        height_percentile=height_percentile,
        weight_percentile=weight_percentile,
    )


def summarize(points: list[TrendPoint]) -> TrendSummary:
    """First/latest/delta per metric; empty fields for an empty series."""
    if not points:
        return TrendSummary()
    first, latest = points[0], points[-1]
    return TrendSummary(
        height=MetricSummary(first=first.height_cm, latest=latest.height_cm),
        weight=MetricSummary(first=first.weight_kg, latest=latest.weight_kg),
        bmi=MetricSummary(first=first.bmi, latest=latest.bmi),
    )


def build_trend(
    engine: GrowthEngine,
    series: Iterable[DatedMeasurement],
    start: date | None = None,
    end: date | None = None,
) -> GrowthTrend:
    """
    Build a growth trend from measurements in ascending date order.

    Args:
        engine: Engine used to evaluate each point
        series: Measurements, oldest first; equal dates are allowed
        start: Optional first date to include (inclusive)
        end: Optional last date to include (inclusive)

    Raises:
        UnorderedSeries: if a date precedes the one before it. The series
            is not re-sorted and no partial trend is returned.
        InvalidMeasurement: if any measurement cannot be evaluated
    """
    series = list(series)
    _check_order(series)

    if start is not None:
        series = [m for m in series if m.date >= start]
    if end is not None:
        series = [m for m in series if m.date <= end]

    points = [build_point(engine, m) for m in series]
    return GrowthTrend(points=points, summary=summarize(points))
