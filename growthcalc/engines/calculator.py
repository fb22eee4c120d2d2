"""
BMI calculation and evaluation engine.

GrowthEngine is the one object callers need: it is built once around a
loaded ReferenceStore and is read-only afterwards, so any number of
threads may share it.
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Sequence

from growthcalc.config import ADULT_AGE_YEARS, GrowthConfig
from growthcalc.engines.classifier import CategoryScheme, classify_adult, classify_child, default_scheme
from growthcalc.engines.lms import to_percentile, value_at_percentile
from growthcalc.engines.reference import ReferenceStore, load_reference_store, parse_sex
from growthcalc.errors import InvalidMeasurement, ReferenceDataCorrupt
from growthcalc.log import get_logger
from growthcalc.models import BMIResult, Measure, Measurement, Sex

logger = get_logger(__name__)

MONTHS_PER_YEAR = 12


def _require_positive(name: str, value: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidMeasurement(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidMeasurement(f"{name} must be a positive finite number, got {value}")
    return float(value)


def _require_age(age_years: float) -> float:
    if isinstance(age_years, bool) or not isinstance(age_years, (int, float)):
        raise InvalidMeasurement(f"age_years must be a number, got {age_years!r}")
    if not math.isfinite(age_years) or age_years < 0:
        raise InvalidMeasurement(f"age_years must be a non-negative finite number, got {age_years}")
    return float(age_years)


def calculate_bmi(height_cm: float, weight_kg: float) -> float:
    """Calculate BMI from height (cm) and weight (kg). Not rounded."""
    height_cm = _require_positive("height_cm", height_cm)
    weight_kg = _require_positive("weight_kg", weight_kg)
    height_m = height_cm / 100
    height_sq = height_m * height_m
    if height_sq == 0:
        raise InvalidMeasurement(f"height_cm {height_cm} is too small to compute a BMI")
    bmi = weight_kg / height_sq
    if not math.isfinite(bmi):
        raise InvalidMeasurement(f"BMI for height_cm={height_cm}, weight_kg={weight_kg} is not finite")
    return bmi


class GrowthEngine:
    """
    Evaluates BMI against growth references.

    Args:
        reference: Loaded reference tables, or None when they failed to
            load. Without them only adults can be evaluated.
        scheme: Category thresholds and text; the packaged scheme if None
    """

    def __init__(
        self,
        reference: ReferenceStore | None,
        scheme: CategoryScheme | None = None,
    ):
        self.reference = reference
        self.scheme = scheme or default_scheme()

    @classmethod
    def from_config(cls, config: GrowthConfig | None = None) -> "GrowthEngine":
        """Load reference data as configured. Raises ReferenceDataCorrupt on bad data."""
        config = config or GrowthConfig()
        config.validate()
        store = load_reference_store(config.reference_dir, config.other_sex_reference)
        return cls(store)

    @property
    def has_reference(self) -> bool:
        return self.reference is not None

    def _store(self) -> ReferenceStore:
        if self.reference is None:
            raise ReferenceDataCorrupt(
                "Reference data is unavailable; pediatric percentiles cannot be computed"
            )
        return self.reference

    def measure_percentile(
        self,
        measure: Measure | str,
        value: float,
        age_years: float,
        sex: Sex | str,
    ) -> tuple[float, float]:
        """
        (z_score, percentile) of a value on a measure's age reference.

        Args:
            measure: "bmi", "weight" or "height"
            value: Measured value in the table's unit
            age_years: Age in years, may be fractional
            sex: "male", "female" or "other"
        """
        value = _require_positive("value", value)
        age_years = _require_age(age_years)
        sex = parse_sex(sex)
        L, M, S = self._store().table(measure).lms(sex, age_years * MONTHS_PER_YEAR)
        return to_percentile(value, L, M, S)

    def bmi_percentile(self, bmi: float, age_years: float, sex: Sex | str) -> tuple[float, float]:
        """(z_score, percentile) of a BMI on the BMI-for-age reference."""
        return self.measure_percentile(Measure.BMI, bmi, age_years, sex)

    def evaluate(
        self,
        height_cm: float,
        weight_kg: float,
        age_years: float,
        sex: Sex | str,
    ) -> BMIResult:
        """
        Calculate BMI and classify it.

        Children (under 20) get a percentile, z-score and percentile-based
        category; adults get a category from fixed BMI thresholds.
        """
        bmi = calculate_bmi(height_cm, weight_kg)
        age_years = _require_age(age_years)
        sex = parse_sex(sex)

        if age_years >= ADULT_AGE_YEARS:
            return BMIResult(
                bmi=bmi,
                is_child=False,
                category_info=classify_adult(bmi, self.scheme),
            )

        z, percentile = self.bmi_percentile(bmi, age_years, sex)
        return BMIResult(
            bmi=bmi,
            is_child=True,
            percentile=percentile,
            z_score=z,
            category_info=classify_child(percentile, self.scheme),
        )

    def evaluate_measurement(self, measurement: Measurement) -> BMIResult:
        return self.evaluate(
            measurement.height_cm,
            measurement.weight_kg,
            measurement.age_years,
            measurement.sex,
        )

    def reference_curve(
        self,
        sex: Sex | str,
        percentiles: Sequence[float] = (5, 50, 85, 95),
        measure: Measure | str = Measure.BMI,
    ) -> list[dict[str, float]]:
        """
        Values at the given percentiles for every tabulated age.

        Returns one dict per age: {"age_months": ..., "p5": ..., "p50": ...}
        """
        table = self._store().table(measure)
        curve = []
        for row in table.rows_for(sex):
            point = {"age_months": row.age_months}
            for p in percentiles:
                point[f"p{p:g}"] = value_at_percentile(p, row.L, row.M, row.S)
            curve.append(point)
        return curve


@lru_cache()
def get_default_engine() -> GrowthEngine:
    """
    Engine for entry points (CLI, server), built once per process.

    If reference data fails to load, the error is logged and an engine
    without references is returned: adults can still be evaluated, while
    pediatric requests raise ReferenceDataCorrupt.
    """
    config = GrowthConfig()
    config.validate()
    try:
        return GrowthEngine.from_config(config)
    except ReferenceDataCorrupt:
        logger.exception("Reference data failed validation; pediatric percentiles disabled")
        return GrowthEngine(None)
