"""
Data models for growth and BMI evaluation.

Inputs (Measurement, DatedMeasurement) deliberately carry no numeric
constraints: the engine re-validates every value itself and raises
InvalidMeasurement, so callers get one error type regardless of where the
value came from. Results are computed on demand and never persisted.
"""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


# =============================================================================
# ENUMS
# =============================================================================


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class BMICategory(str, Enum):
    UNDERWEIGHT = "underweight"
    HEALTHY = "healthy"
    OVERWEIGHT = "overweight"
    OBESE = "obese"


class Measure(str, Enum):
    """Growth measures with reference tables."""
    BMI = "bmi"
    WEIGHT = "weight"
    HEIGHT = "height"


# =============================================================================
# INPUTS
# =============================================================================


class Measurement(BaseModel):
    """A single height/weight reading for one subject."""
    height_cm: float
    weight_kg: float
    age_years: float
    sex: Sex


class DatedMeasurement(Measurement):
    """A measurement taken on a given date, as stored by the tracker."""
    date: date
    notes: str | None = None


# =============================================================================
# RESULTS
# =============================================================================


class CategoryInfo(BaseModel):
    """Category metadata attached to a BMI result."""
    model_config = ConfigDict(frozen=True)

    category: BMICategory
    label: str
    description: str
    recommendation: str
    color: str = ""
    bg_color: str = ""


class BMIResult(BaseModel):
    """BMI with its classification. Percentile and z-score are set for children only."""
    bmi: float
    is_child: bool
    percentile: float | None = None
    z_score: float | None = None
    category_info: CategoryInfo

    @computed_field
    @property
    def category(self) -> BMICategory:
        return self.category_info.category


class TrendPoint(BaseModel):
    """One point of a growth trend."""
    date: date
    height_cm: float
    weight_kg: float
    age_years: float
    notes: str | None = None
    result: BMIResult

    # Height/weight-for-age, children only
    height_percentile: float | None = None
    weight_percentile: float | None = None

    @computed_field
    @property
    def bmi(self) -> float:
        return self.result.bmi


class MetricSummary(BaseModel):
    """First and latest value of a metric over a series."""
    first: float
    latest: float

    @computed_field
    @property
    def delta(self) -> float:
        return self.latest - self.first


class TrendSummary(BaseModel):
    """Per-metric summaries. All fields are None for an empty series."""
    height: MetricSummary | None = None
    weight: MetricSummary | None = None
    bmi: MetricSummary | None = None


class GrowthTrend(BaseModel):
    """Trend points plus series-level summary."""
    points: list[TrendPoint] = Field(default_factory=list)
    summary: TrendSummary = Field(default_factory=TrendSummary)

    @computed_field
    @property
    def count(self) -> int:
        return len(self.points)
