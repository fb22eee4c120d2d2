"""
Tests for BMI category classification.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from pydantic import ValidationError

from growthcalc.engines.classifier import (
    classify,
    classify_adult,
    classify_child,
    default_scheme,
    load_category_scheme,
)
from growthcalc.errors import InvalidMeasurement, ReferenceDataCorrupt
from growthcalc.models import BMICategory


class TestAdult:
    """Fixed BMI thresholds for age 20 and over."""

    @pytest.mark.parametrize("bmi,expected", [
        (15.0, BMICategory.UNDERWEIGHT),
        (18.49, BMICategory.UNDERWEIGHT),
        (18.5, BMICategory.HEALTHY),
        (24.99, BMICategory.HEALTHY),
        (25.0, BMICategory.OVERWEIGHT),
        (29.99, BMICategory.OVERWEIGHT),
        (30.0, BMICategory.OBESE),
        (45.0, BMICategory.OBESE),
    ])
    def test_thresholds(self, bmi, expected):
        assert classify_adult(bmi).category == expected

    def test_exactly_25_is_overweight(self):
        info = classify(35, 25.0)
        assert info.category == BMICategory.OVERWEIGHT
        assert info.label == "Overweight"

    @pytest.mark.parametrize("bmi", [0.0, -1.0, float("nan"), float("inf")])
    def test_invalid_bmi(self, bmi):
        with pytest.raises(InvalidMeasurement):
            classify_adult(bmi)


class TestChild:
    """BMI-for-age percentile thresholds."""

    @pytest.mark.parametrize("percentile,expected", [
        (0.1, BMICategory.UNDERWEIGHT),
        (4.99, BMICategory.UNDERWEIGHT),
        (5.0, BMICategory.HEALTHY),
        (50.0, BMICategory.HEALTHY),
        (84.99, BMICategory.HEALTHY),
        (85.0, BMICategory.OVERWEIGHT),
        (94.99, BMICategory.OVERWEIGHT),
        (95.0, BMICategory.OBESE),
        (99.9, BMICategory.OBESE),
    ])
    def test_thresholds(self, percentile, expected):
        assert classify_child(percentile).category == expected

    @pytest.mark.parametrize("percentile", [-0.1, 100.1, float("nan")])
    def test_invalid_percentile(self, percentile):
        with pytest.raises(InvalidMeasurement):
            classify_child(percentile)

    def test_child_requires_percentile(self):
        with pytest.raises(InvalidMeasurement):
            classify(8, 16.0)


class TestBranching:
    """Age decides which thresholds apply."""

    def test_under_20_uses_percentile(self):
        # BMI alone would be obese; the percentile says healthy
        assert classify(19.99, 31.0, 50.0).category == BMICategory.HEALTHY

    def test_20_uses_bmi(self):
        # Percentile is ignored for adults
        assert classify(20, 25.0, 1.0).category == BMICategory.OVERWEIGHT

    @pytest.mark.parametrize("age", [-1.0, float("nan")])
    def test_invalid_age(self, age):
        with pytest.raises(InvalidMeasurement):
            classify(age, 22.0, 50.0)


class TestCategoryMetadata:
    """Description, recommendation and presentation hints."""

    def test_metadata_present(self):
        for info in (classify_adult(22.0), classify_child(50.0)):
            assert info.label == "Healthy Weight"
            assert info.description
            assert info.recommendation
            assert info.color == "text-green-700"
            assert info.bg_color == "bg-green-100"

    def test_adult_and_child_text_differ(self):
        assert classify_adult(17.0).recommendation != classify_child(2.0).recommendation

    def test_lookup_is_stable(self):
        assert classify_child(50.0) is classify_child(60.0)

    def test_category_info_is_frozen(self):
        info = classify_adult(22.0)
        with pytest.raises(ValidationError):
            info.label = "Changed"

    def test_scheme_thresholds(self):
        scheme = default_scheme()
        assert scheme.thresholds("adult") == {
            "underweight": None,
            "healthy": 18.5,
            "overweight": 25.0,
            "obese": 30.0,
        }
        assert scheme.thresholds("child") == {
            "underweight": None,
            "healthy": 5.0,
            "overweight": 85.0,
            "obese": 95.0,
        }


class TestLoadScheme:
    """Validation of the category data file."""

    def test_missing_category(self, tmp_path):
        path = tmp_path / "bmi_categories.yaml"
        path.write_text("adult: {}\nchild: {}\n")
        with pytest.raises(ReferenceDataCorrupt):
            load_category_scheme(path)

    def test_descending_thresholds(self, tmp_path):
        entry = "label: x\n    description: x\n    recommendation: x"
        body = "\n".join(
            f"  {name}:\n    lower: {lower}\n    {entry}"
            for name, lower in (("underweight", "null"), ("healthy", 25), ("overweight", 18.5), ("obese", 30))
        )
        path = tmp_path / "bmi_categories.yaml"
        path.write_text(f"adult:\n{body}\nchild:\n{body}\n")
        with pytest.raises(ReferenceDataCorrupt):
            load_category_scheme(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ReferenceDataCorrupt):
            load_category_scheme(tmp_path / "missing.yaml")
