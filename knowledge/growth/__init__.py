"""
Growth reference data.

YAML assets with CDC 2000 LMS parameters and BMI category metadata.
They are read by growthcalc.engines.reference and
growthcalc.engines.classifier.
"""

from pathlib import Path

GROWTH_DATA_DIR = Path(__file__).parent

# measure -> file with its LMS table
REFERENCE_FILES = {
    "bmi": "bmi_for_age.yaml",
    "weight": "weight_for_age.yaml",
    "height": "height_for_age.yaml",
}

CATEGORIES_FILE = "bmi_categories.yaml"

__all__ = [
    "GROWTH_DATA_DIR",
    "REFERENCE_FILES",
    "CATEGORIES_FILE",
]
