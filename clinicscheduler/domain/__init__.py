"""
Domain layer - Pure scheduling rules without external dependencies.
"""

from .availability import AvailabilityResolver
from .conflicts import ConflictDetector
from .models import (
    AppointmentCandidate,
    AppointmentStatus,
    BookedAppointment,
    ConflictFinding,
    ConflictKind,
    DayAvailability,
    Frequency,
    LeavePeriod,
    Occurrence,
    RecurrencePattern,
    TimeWindow,
    WeeklyWorkingHours,
    Weekday,
    WorkingHours,
)
from .recurrence import RecurrenceExpander

__all__ = [
    "AppointmentCandidate",
    "AppointmentStatus",
    "AvailabilityResolver",
    "BookedAppointment",
    "ConflictDetector",
    "ConflictFinding",
    "ConflictKind",
    "DayAvailability",
    "Frequency",
    "LeavePeriod",
    "Occurrence",
    "RecurrenceExpander",
    "RecurrencePattern",
    "TimeWindow",
    "WeeklyWorkingHours",
    "Weekday",
    "WorkingHours",
]
