"""
Growth evaluation engines.
"""

from .calculator import (
    GrowthEngine,
    calculate_bmi,
    get_default_engine,
)
from .classifier import (
    CategoryScheme,
    classify,
    classify_adult,
    classify_child,
    load_category_scheme,
)
from .lms import interpolate_lms, raw_percentile, to_percentile, value_at_percentile
from .reference import (
    ReferenceRow,
    ReferenceStore,
    ReferenceTable,
    build_reference_table,
    load_reference_store,
    load_reference_table,
    parse_sex,
)
from .trend import build_trend

__all__ = [
    "GrowthEngine",
    "calculate_bmi",
    "get_default_engine",
    "CategoryScheme",
    "classify",
    "classify_adult",
    "classify_child",
    "load_category_scheme",
    "interpolate_lms",
    "raw_percentile",
    "to_percentile",
    "value_at_percentile",
    "ReferenceRow",
    "ReferenceStore",
    "ReferenceTable",
    "build_reference_table",
    "load_reference_store",
    "load_reference_table",
    "parse_sex",
    "build_trend",
]
