"""
Domain-specific exception hierarchy for the clinic scheduler.

Scheduling conflicts are never raised: they are returned as
``ConflictFinding`` values by the conflict detector.
"""


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class ConfigurationError(SchedulingError):
    """Raised when provider reference data is missing or inconsistent."""


class UnknownProviderError(SchedulingError):
    """Raised when a provider id cannot be found in the directory."""


class InvalidCandidateError(SchedulingError, ValueError):
    """Raised when a candidate appointment has a non-positive or overflowing duration."""


class ConfigurationWarning(UserWarning):
    """Emitted when an unbounded recurrence is cut off at the safety cap."""
