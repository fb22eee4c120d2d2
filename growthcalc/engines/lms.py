"""
LMS method: interpolation of reference parameters and the z-score /
percentile transform.

Reference: https://www.cdc.gov/growthcharts/

The LMS method expresses a skewed reference distribution as:
- L (lambda): Box-Cox power transformation
- M (mu): Median
- S (sigma): Coefficient of variation

Z-score = ((value/M)^L - 1) / (L * S)  when L ≠ 0
Z-score = ln(value/M) / S              when L = 0

Percentile = 100 * Φ(Z-score) where Φ is the standard normal CDF
"""

from __future__ import annotations

import math
from bisect import bisect_left
from typing import Sequence

from scipy import stats

from growthcalc.config import PERCENTILE_CEILING, PERCENTILE_FLOOR
from growthcalc.errors import InvalidMeasurement

LMS = tuple[float, float, float]

# Below this |L| the log-normal limit is used
L_EPSILON = 1e-10


def interpolate_lms(
    ages: Sequence[float],
    params: Sequence[LMS],
    age_months: float,
) -> LMS:
    """
    Interpolate LMS values for a given age.

    Args:
        ages: Tabulated ages in months, strictly ascending
        params: (L, M, S) for each tabulated age
        age_months: Age to evaluate, may be fractional

    Ages outside the table clamp to the nearest row; nothing is
    extrapolated. A tabulated age returns its row unchanged.
    """
    if not math.isfinite(age_months):
        raise InvalidMeasurement(f"Age must be finite, got {age_months}")

    if age_months <= ages[0]:
        return params[0]
    if age_months >= ages[-1]:
        return params[-1]

    i = bisect_left(ages, age_months)
    if ages[i] == age_months:
        return params[i]

    lower_age, upper_age = ages[i - 1], ages[i]
    t = (age_months - lower_age) / (upper_age - lower_age)

    L1, M1, S1 = params[i - 1]
    L2, M2, S2 = params[i]

    return (
        L1 + t * (L2 - L1),
        M1 + t * (M2 - M1),
        S1 + t * (S2 - S1),
    )


def z_score_from_lms(value: float, L: float, M: float, S: float) -> float:
    """Calculate Z-score from value and LMS parameters."""
    if not math.isfinite(value) or value <= 0:
        raise InvalidMeasurement(f"Value must be a positive finite number, got {value}")
    ratio = value / M
    if ratio == 0 or not math.isfinite(ratio):
        raise InvalidMeasurement(f"Value {value} is outside the range of this LMS curve")
    if abs(L) < L_EPSILON:
        return math.log(ratio) / S
    try:
        return (math.pow(ratio, L) - 1) / (L * S)
    except OverflowError:
        raise InvalidMeasurement(f"Value {value} is outside the range of this LMS curve") from None


def value_from_lms_z(z: float, L: float, M: float, S: float) -> float:
    """Calculate the measurement value at a Z-score."""
    if abs(L) < L_EPSILON:
        return M * math.exp(z * S)
    base = 1 + L * S * z
    if base <= 0:
        # Box-Cox curve is undefined this far into the tail
        raise ValueError(f"Z-score {z} is outside the range of this LMS curve")
    return M * math.pow(base, 1 / L)


def raw_percentile(z: float) -> float:
    """Unclamped percentile (0-100) for a Z-score."""
    return float(stats.norm.cdf(z)) * 100


def clamp_percentile(percentile: float) -> float:
    return min(PERCENTILE_CEILING, max(PERCENTILE_FLOOR, percentile))


def to_percentile(value: float, L: float, M: float, S: float) -> tuple[float, float]:
    """
    Convert a measurement to (z_score, percentile).

    The percentile is clamped to [0.1, 99.9]; the z-score is returned
    unclamped so callers can tell a tail value from the clamp.
    """
    z = z_score_from_lms(value, L, M, S)
    return z, clamp_percentile(raw_percentile(z))


def value_at_percentile(percentile: float, L: float, M: float, S: float) -> float:
    """Measurement value at a percentile (0-100, exclusive)."""
    if not 0 < percentile < 100:
        raise ValueError(f"Percentile must be between 0 and 100 exclusive, got {percentile}")
    z = float(stats.norm.ppf(percentile / 100))
    return value_from_lms_z(z, L, M, S)
