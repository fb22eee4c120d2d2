"""
Error types raised by the growth engine.

All errors are local to a single call; nothing here is retried.
"""


class GrowthError(ValueError):
    """Base class for growth engine errors."""


class InvalidMeasurement(GrowthError):
    """A height, weight, age or sex value that cannot be evaluated."""


class UnorderedSeries(GrowthError):
    """A measurement series whose dates are not in ascending order."""


class ReferenceDataCorrupt(GrowthError):
    """Reference tables are missing or failed load-time validation."""
