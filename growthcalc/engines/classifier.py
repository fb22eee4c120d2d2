"""
BMI category classifier.

Adults (20 years and over) are classified by fixed BMI thresholds, children
by BMI-for-age percentile. Thresholds and guidance text are data-driven
(knowledge/growth/bmi_categories.yaml). Each threshold is the inclusive
lower bound of its category, so a value exactly on a boundary belongs to
the higher category.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

from growthcalc.config import ADULT_AGE_YEARS
from growthcalc.errors import InvalidMeasurement, ReferenceDataCorrupt
from growthcalc.models import BMICategory, CategoryInfo
from knowledge.growth import CATEGORIES_FILE, GROWTH_DATA_DIR

# Category order, lowest band first
CATEGORY_ORDER = (
    BMICategory.UNDERWEIGHT,
    BMICategory.HEALTHY,
    BMICategory.OVERWEIGHT,
    BMICategory.OBESE,
)


@dataclass(frozen=True)
class CategoryBand:
    """A category and the inclusive lower bound of its range."""
    lower: float | None
    info: CategoryInfo


@dataclass(frozen=True)
class CategoryScheme:
    """Adult (BMI) and child (percentile) category bands, lowest first."""
    adult: tuple[CategoryBand, ...]
    child: tuple[CategoryBand, ...]

    def thresholds(self, branch: str) -> dict[str, float | None]:
        bands = self.adult if branch == "adult" else self.child
        return {band.info.category.value: band.lower for band in bands}


def _parse_bands(raw: object, branch: str) -> tuple[CategoryBand, ...]:
    if not isinstance(raw, dict):
        raise ReferenceDataCorrupt(f"{CATEGORIES_FILE}: missing '{branch}' categories")

    bands: list[CategoryBand] = []
    for position, category in enumerate(CATEGORY_ORDER):
        entry = raw.get(category.value)
        if not isinstance(entry, dict):
            raise ReferenceDataCorrupt(f"{CATEGORIES_FILE}: {branch} has no '{category.value}' entry")

        lower = entry.get("lower")
        if position == 0:
            if lower is not None:
                raise ReferenceDataCorrupt(
                    f"{CATEGORIES_FILE}: {branch} {category.value} must have no lower bound"
                )
        elif not isinstance(lower, (int, float)) or isinstance(lower, bool) or not math.isfinite(lower):
            raise ReferenceDataCorrupt(
                f"{CATEGORIES_FILE}: {branch} {category.value} needs a numeric lower bound"
            )
        elif bands[-1].lower is not None and lower <= bands[-1].lower:
            raise ReferenceDataCorrupt(f"{CATEGORIES_FILE}: {branch} thresholds must ascend")

        try:
            info = CategoryInfo(
                category=category,
                label=entry["label"],
                description=entry["description"],
                recommendation=entry["recommendation"],
                color=entry.get("color", ""),
                bg_color=entry.get("bg_color", ""),
            )
        except (KeyError, ValueError) as e:
            raise ReferenceDataCorrupt(
                f"{CATEGORIES_FILE}: {branch} {category.value} is incomplete: {e}"
            ) from e

        bands.append(CategoryBand(lower=float(lower) if lower is not None else None, info=info))

    return tuple(bands)


def load_category_scheme(path: Path | None = None) -> CategoryScheme:
    """Load and validate category thresholds and guidance text."""
    path = Path(path) if path else GROWTH_DATA_DIR / CATEGORIES_FILE
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ReferenceDataCorrupt(f"Cannot read category data {path}: {e}") from e

    if not isinstance(data, dict):
        raise ReferenceDataCorrupt(f"{path.name}: expected a mapping at top level")

    return CategoryScheme(
        adult=_parse_bands(data.get("adult"), "adult"),
        child=_parse_bands(data.get("child"), "child"),
    )


@lru_cache()
def default_scheme() -> CategoryScheme:
    """The packaged category scheme, loaded once."""
    return load_category_scheme()


def _band_for(value: float, bands: tuple[CategoryBand, ...]) -> CategoryInfo:
    for band in reversed(bands):
        if band.lower is None or value >= band.lower:
            return band.info
    return bands[0].info


def classify_adult(bmi: float, scheme: CategoryScheme | None = None) -> CategoryInfo:
    """Classify an adult BMI against fixed thresholds."""
    if not math.isfinite(bmi) or bmi <= 0:
        raise InvalidMeasurement(f"BMI must be a positive finite number, got {bmi}")
    return _band_for(bmi, (scheme or default_scheme()).adult)


def classify_child(percentile: float, scheme: CategoryScheme | None = None) -> CategoryInfo:
    """Classify a BMI-for-age percentile."""
    if not math.isfinite(percentile) or not 0 <= percentile <= 100:
        raise InvalidMeasurement(f"Percentile must be within 0-100, got {percentile}")
    return _band_for(percentile, (scheme or default_scheme()).child)


def classify(
    age_years: float,
    bmi: float,
    percentile: float | None = None,
    scheme: CategoryScheme | None = None,
) -> CategoryInfo:
    """
    Map a BMI (adults) or BMI-for-age percentile (children) to a category.

    Args:
        age_years: Age in years; 20 and over uses adult thresholds
        bmi: Body mass index
        percentile: BMI-for-age percentile, required under 20 years
        scheme: Category scheme, defaults to the packaged one

    Returns:
        CategoryInfo with label, description and recommendation
    """
    if not math.isfinite(age_years) or age_years < 0:
        raise InvalidMeasurement(f"Age must be a non-negative finite number, got {age_years}")
    if age_years >= ADULT_AGE_YEARS:
        return classify_adult(bmi, scheme)
    if percentile is None:
        raise InvalidMeasurement("A BMI-for-age percentile is required under age 20")
    return classify_child(percentile, scheme)
