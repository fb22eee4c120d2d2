"""
growthcalc - growth-standard BMI and percentile engine.

Computes BMI, BMI-for-age percentiles (CDC 2000 LMS references) and
weight categories for children and adults, and aggregates growth trends.
"""

from growthcalc.engines import (
    GrowthEngine,
    build_trend,
    calculate_bmi,
    classify,
    get_default_engine,
    load_reference_store,
)
from growthcalc.errors import (
    GrowthError,
    InvalidMeasurement,
    ReferenceDataCorrupt,
    UnorderedSeries,
)

__version__ = "0.1.0"

__all__ = [
    "GrowthEngine",
    "build_trend",
    "calculate_bmi",
    "classify",
    "get_default_engine",
    "load_reference_store",
    "GrowthError",
    "InvalidMeasurement",
    "ReferenceDataCorrupt",
    "UnorderedSeries",
]
