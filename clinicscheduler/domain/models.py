"""
Domain models for provider availability, appointments and recurrence rules.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum, IntEnum
from typing import FrozenSet, Mapping, Optional, Union

import pendulum
from pendulum import Date

from .exceptions import ConfigurationError, InvalidCandidateError

MINUTES_PER_DAY = 24 * 60


def as_date(value: date) -> Date:
    """Normalise any ``date``/``datetime`` into a pendulum ``Date``."""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, Date):
        return value
    return pendulum.date(value.year, value.month, value.day)


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


class Weekday(IntEnum):
    """
    ISO weekday numbering (Monday=1 ... Sunday=7).

    Derived from the calendar date itself, never from a locale-formatted string.
    """
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7

    @classmethod
    def of(cls, value: date) -> "Weekday":
        """Return the weekday of a calendar date."""
        return cls(value.isoweekday())

    @classmethod
    def parse(cls, value: Union[str, int, "Weekday"]) -> "Weekday":
        """Parse a weekday from its name ("monday", "Mon") or ISO number."""
        if isinstance(value, Weekday):
            return value
        if isinstance(value, int):
            return cls(value)

        key = value.strip().lower()
        for weekday in cls:
            if weekday.name.lower() == key or weekday.name.lower()[:3] == key:
                return weekday
        raise ValueError(f"Unknown weekday: '{value}'")

    @property
    def label(self) -> str:
        return self.name.capitalize()


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"
    RESCHEDULED = "rescheduled"

    @property
    def blocks_time(self) -> bool:
        """Cancelled and no-show appointments free up their slot."""
        return self not in (AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW)


class ConflictKind(str, Enum):
    OUTSIDE_HOURS = "outside-hours"
    OVERLAP = "overlap"
    DOUBLE_BOOKING = "double-booking"


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class TimeWindow:
    """
    Represents an immutable half-open time-of-day window ``[start, end)``.

    Invariant: start must be before end.
    """
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def overlaps(self, other: "TimeWindow") -> bool:
        """Check if this window overlaps with another."""
        return self.start < other.end and self.end > other.start

    def contains(self, other: "TimeWindow") -> bool:
        """Check if another window lies completely inside this one."""
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{format_time(self.start)} - {format_time(self.end)}"


@dataclass(frozen=True)
class WorkingHours:
    """
    Working hours of a provider on one weekday.

    When ``available`` is false, ``start``/``end`` carry no meaning.
    """
    start: time
    end: time
    available: bool = True
    break_window: Optional[TimeWindow] = None

    def __post_init__(self):
        if not self.available:
            return
        if self.start >= self.end:
            raise ValueError(f"Working hours must open before they close ({self.start} - {self.end})")
        if self.break_window and not self.window().contains(self.break_window):
            raise ValueError(f"Break {self.break_window} lies outside working hours {self.window()}")

    def window(self) -> TimeWindow:
        return TimeWindow(start=self.start, end=self.end)


@dataclass(frozen=True)
class WeeklyWorkingHours:
    """Per-weekday working hours of a single provider."""
    days: Mapping[Weekday, WorkingHours]

    @classmethod
    def from_mapping(cls, days: Mapping[Union[str, int, Weekday], WorkingHours]) -> "WeeklyWorkingHours":
        """Build the table from a mapping keyed by weekday names or numbers."""
        return cls(days={Weekday.parse(key): hours for key, hours in days.items()})

    def for_weekday(self, weekday: Weekday) -> WorkingHours:
        """
        Get the working hours configured for a weekday.

        Raises:
            ConfigurationError: If the table has no entry for that weekday
        """
        try:
            return self.days[weekday]
        except KeyError:
            raise ConfigurationError(f"No working hours configured for {weekday.label}") from None


@dataclass(frozen=True)
class LeavePeriod:
    """An inclusive range of dates on which a provider is away."""
    start_date: Date
    end_date: Date
    reason: str = ""

    def __post_init__(self):
        object.__setattr__(self, "start_date", as_date(self.start_date))
        object.__setattr__(self, "end_date", as_date(self.end_date))
        if self.start_date > self.end_date:
            raise ValueError(f"Leave starting {self.start_date} cannot end on {self.end_date}")

    def covers(self, on_date: date) -> bool:
        return self.start_date <= as_date(on_date) <= self.end_date


@dataclass(frozen=True)
class DayAvailability:
    """Resolved availability of a provider on a concrete date."""
    date: Date
    weekday: Weekday
    available: bool
    start: time
    end: time
    break_window: Optional[TimeWindow] = None
    on_leave: bool = False

    def window(self) -> TimeWindow:
        return TimeWindow(start=self.start, end=self.end)


@dataclass(frozen=True)
class AppointmentCandidate:
    """
    A proposed, not yet persisted booking.

    ``end_time`` is always derived from ``start_time`` and ``duration_minutes``.
    """
    provider_id: str
    date: Date
    start_time: time
    duration_minutes: int

    def __post_init__(self):
        object.__setattr__(self, "date", as_date(self.date))
        if self.duration_minutes <= 0:
            raise InvalidCandidateError(
                f"Duration must be positive, got {self.duration_minutes} minutes"
            )
        if _minutes(self.start_time) + self.duration_minutes >= MINUTES_PER_DAY:
            raise InvalidCandidateError(
                f"Appointment starting {format_time(self.start_time)} for "
                f"{self.duration_minutes} minutes would end at or after midnight"
            )

    @property
    def end_time(self) -> time:
        return _from_minutes(_minutes(self.start_time) + self.duration_minutes)

    def window(self) -> TimeWindow:
        return TimeWindow(start=self.start_time, end=self.end_time)

    def __str__(self) -> str:
        return f"{self.date.to_date_string()} {self.window()} ({self.provider_id})"


@dataclass(frozen=True)
class BookedAppointment:
    """An appointment already held by the appointment repository."""
    id: str
    provider_id: str
    date: Date
    start_time: time
    end_time: time
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    patient_id: Optional[str] = None
    parent_appointment_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "date", as_date(self.date))
        object.__setattr__(self, "status", AppointmentStatus(self.status))
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Appointment {self.id} must end after it starts "
                f"({format_time(self.start_time)} - {format_time(self.end_time)})"
            )

    def window(self) -> TimeWindow:
        return TimeWindow(start=self.start_time, end=self.end_time)


@dataclass(frozen=True)
class ConflictFinding:
    """A structured description of a scheduling problem."""
    kind: ConflictKind
    message: str
    related_appointment_id: Optional[str] = None


@dataclass(frozen=True)
class Bounded:
    """Series stops after ``count`` occurrences."""
    count: int


@dataclass(frozen=True)
class BoundedByDate:
    """Series stops after the last occurrence on or before ``end_date``."""
    end_date: Date


@dataclass(frozen=True)
class DefaultCapped:
    """No bound was given; the expander's safety cap applies."""


RecurrenceBound = Union[Bounded, BoundedByDate, DefaultCapped]

_FREQUENCY_UNITS = {
    Frequency.DAILY: "day",
    Frequency.WEEKLY: "week",
    Frequency.MONTHLY: "month",
    Frequency.YEARLY: "year",
}


@dataclass(frozen=True)
class RecurrencePattern:
    """
    Recurrence rule: "every ``interval`` ``frequency`` units".

    ``occurrences`` takes precedence over ``end_date`` when both are given.
    """
    frequency: Frequency
    interval: int = 1
    days_of_week: FrozenSet[Weekday] = field(default_factory=frozenset)
    day_of_month: Optional[int] = None
    end_date: Optional[Date] = None
    occurrences: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "frequency", Frequency(self.frequency))
        object.__setattr__(
            self, "days_of_week", frozenset(Weekday.parse(d) for d in self.days_of_week)
        )
        if self.end_date is not None:
            object.__setattr__(self, "end_date", as_date(self.end_date))

        if self.interval < 1:
            raise ValueError(f"Interval must be a positive integer, got {self.interval}")
        if self.occurrences is not None and self.occurrences < 1:
            raise ValueError(f"Occurrences must be a positive integer, got {self.occurrences}")
        if self.day_of_month is not None and not 1 <= self.day_of_month <= 31:
            raise ValueError(f"Day of month must be between 1 and 31, got {self.day_of_month}")

    def bound(self) -> RecurrenceBound:
        """Resolve the series length into exactly one bound variant."""
        if self.occurrences is not None:
            return Bounded(count=self.occurrences)
        if self.end_date is not None:
            return BoundedByDate(end_date=self.end_date)
        return DefaultCapped()

    def describe(self) -> str:
        unit = _FREQUENCY_UNITS[self.frequency]
        text = f"every {self.interval} {unit}{'s' if self.interval > 1 else ''}"
        if self.days_of_week:
            text += " on " + ", ".join(d.label for d in sorted(self.days_of_week))
        return text


@dataclass(frozen=True)
class Occurrence:
    """One concrete instance of a recurring appointment."""
    index: int
    candidate: AppointmentCandidate

    @property
    def date(self) -> Date:
        return self.candidate.date


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _from_minutes(total: int) -> time:
    return time(hour=total // 60, minute=total % 60)
