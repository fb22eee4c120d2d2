"""
Runtime configuration for the growth engine.

Values come from environment variables and are read once, when the
engine is built. Nothing reads the environment at call time.
"""

from __future__ import annotations

import os
from pathlib import Path

# Age (years) from which adult BMI thresholds apply
ADULT_AGE_YEARS = 20.0

# Display bounds for pediatric percentiles
PERCENTILE_FLOOR = 0.1
PERCENTILE_CEILING = 99.9

OTHER_SEX_POLICIES = ("average", "male", "female")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class GrowthConfig:
    """Configuration for reference data loading and logging."""

    def __init__(
        self,
        other_sex_reference: str | None = None,
        reference_dir: str | Path | None = None,
        log_level: str | None = None,
    ):
        self.other_sex_reference = (
            other_sex_reference
            or os.environ.get("GROWTH_OTHER_SEX_REFERENCE")
            or "average"
        ).lower()
        reference_dir = reference_dir or os.environ.get("GROWTH_REFERENCE_DIR")
        self.reference_dir = Path(reference_dir) if reference_dir else None
        self.log_level = (
            log_level or os.environ.get("GROWTH_LOG_LEVEL") or "WARNING"
        ).upper()

    def validate(self) -> None:
        """Raise error if a setting has an unsupported value."""
        if self.other_sex_reference not in OTHER_SEX_POLICIES:
            raise ValueError(
                f"GROWTH_OTHER_SEX_REFERENCE must be one of {', '.join(OTHER_SEX_POLICIES)}, "
                f"got {self.other_sex_reference!r}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"GROWTH_LOG_LEVEL {self.log_level!r} is not a logging level")
        if self.reference_dir is not None and not self.reference_dir.is_dir():
            raise ValueError(f"GROWTH_REFERENCE_DIR {self.reference_dir} is not a directory")

    def __repr__(self) -> str:
        return (
            f"GrowthConfig(other_sex_reference={self.other_sex_reference!r}, "
            f"reference_dir={self.reference_dir!r}, log_level={self.log_level!r})"
        )
