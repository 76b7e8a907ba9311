"""
Expansion of recurring appointments into concrete occurrences.
"""

import logging
import warnings
from dataclasses import replace
from itertools import count, islice, takewhile
from typing import Iterator, List

import pendulum
from pendulum import Date

from .exceptions import ConfigurationWarning
from .models import (
    AppointmentCandidate,
    Bounded,
    BoundedByDate,
    Frequency,
    Occurrence,
    RecurrencePattern,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_OCCURRENCES = 366
DEFAULT_HORIZON_MONTHS = 12


class RecurrenceExpander:
    """
    Materialises the occurrences implied by a recurrence pattern.

    The seed appointment is always occurrence 0. Every occurrence carries the
    seed's start time and duration; only the date changes. Conflict detection
    is not performed here.
    """

    def __init__(
        self,
        max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
        horizon_months: int = DEFAULT_HORIZON_MONTHS,
    ):
        if max_occurrences < 1 or horizon_months < 1:
            raise ValueError("Recurrence safety cap must be positive")
        self.max_occurrences = max_occurrences
        self.horizon_months = horizon_months

    def expand(self, seed: AppointmentCandidate, pattern: RecurrencePattern) -> List[Occurrence]:
        """
        Expand a seed appointment into its ordered occurrences.

        Args:
            seed: The first appointment of the series
            pattern: Recurrence rule to apply

        Returns:
            Occurrences in strictly ascending date order
        """
        dates = self._iter_dates(seed.date, pattern)
        bound = pattern.bound()

        if isinstance(bound, Bounded):
            selected = list(islice(dates, bound.count))
        elif isinstance(bound, BoundedByDate):
            selected = list(takewhile(lambda d: d <= bound.end_date, dates))
        else:
            horizon = seed.date.add(months=self.horizon_months)
            message = (
                f"Recurrence {pattern.describe()} has neither an end date nor an "
                f"occurrence count; capped at {self.max_occurrences} occurrences "
                f"before {horizon.to_date_string()}"
            )
            logger.warning(message)
            warnings.warn(message, ConfigurationWarning, stacklevel=2)
            selected = list(
                islice(takewhile(lambda d: d < horizon, dates), self.max_occurrences)
            )

        logger.debug("Expanded %s into %d occurrence(s)", pattern.describe(), len(selected))

        return [
            Occurrence(index=index, candidate=replace(seed, date=day))
            for index, day in enumerate(selected)
        ]

    def _iter_dates(self, seed_date: Date, pattern: RecurrencePattern) -> Iterator[Date]:
        """Yield the unbounded, ascending sequence of occurrence dates."""
        if pattern.frequency is Frequency.DAILY:
            return self._step_days(seed_date, pattern.interval)
        if pattern.frequency is Frequency.WEEKLY:
            if pattern.days_of_week:
                return self._weekly_on_days(seed_date, pattern)
            return self._step_days(seed_date, pattern.interval * 7)
        if pattern.frequency is Frequency.MONTHLY:
            return self._monthly(seed_date, pattern)
        return self._yearly(seed_date, pattern.interval)

    @staticmethod
    def _step_days(seed_date: Date, days: int) -> Iterator[Date]:
        for index in count():
            yield seed_date.add(days=index * days)

    @staticmethod
    def _weekly_on_days(seed_date: Date, pattern: RecurrencePattern) -> Iterator[Date]:
        """
        Walk Monday-based week windows ``interval`` weeks apart.

        The first window is the seed's own week; only days after the seed count.
        """
        weekdays = sorted(pattern.days_of_week)
        week_start = seed_date.subtract(days=seed_date.isoweekday() - 1)

        yield seed_date
        while True:
            for weekday in weekdays:
                day = week_start.add(days=weekday - 1)
                if day > seed_date:
                    yield day
            week_start = week_start.add(weeks=pattern.interval)

    @staticmethod
    def _monthly(seed_date: Date, pattern: RecurrencePattern) -> Iterator[Date]:
        """
        Same day of month every ``interval`` months, clamped to the month's last day.

        Each date is computed from the seed month, so a clamp never carries over.
        """
        requested_day = pattern.day_of_month or seed_date.day
        first_of_seed_month = pendulum.date(seed_date.year, seed_date.month, 1)

        yield seed_date
        for index in count(1):
            month_start = first_of_seed_month.add(months=index * pattern.interval)
            day = min(requested_day, month_start.days_in_month)
            yield pendulum.date(month_start.year, month_start.month, day)

    @staticmethod
    def _yearly(seed_date: Date, interval: int) -> Iterator[Date]:
        """Same date every ``interval`` years; Feb 29 falls back to Feb 28."""
        for index in count():
            year = seed_date.year + index * interval
            last_day = pendulum.date(year, seed_date.month, 1).days_in_month
            yield pendulum.date(year, seed_date.month, min(seed_date.day, last_day))
