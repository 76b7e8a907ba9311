"""
Resolution of a provider's weekly working hours into a concrete day.
"""

import logging
from datetime import date
from typing import Sequence

from .models import DayAvailability, LeavePeriod, WeeklyWorkingHours, Weekday, as_date

logger = logging.getLogger(__name__)


class AvailabilityResolver:
    """
    Determines whether a provider is open on a date and which hours apply.

    The weekday is computed from the ISO calendar of the date, so the result
    does not depend on locale or timezone settings.
    """

    def resolve(
        self,
        working_hours: WeeklyWorkingHours,
        on_date: date,
        leave: Sequence[LeavePeriod] = (),
    ) -> DayAvailability:
        """
        Resolve the availability of a provider on a single date.

        Args:
            working_hours: The provider's weekly working-hours table
            on_date: Calendar date to resolve
            leave: Approved leave periods of the provider

        Returns:
            DayAvailability for that date

        Raises:
            ConfigurationError: If the table lacks an entry for the weekday
        """
        day = as_date(on_date)
        weekday = Weekday.of(day)
        hours = working_hours.for_weekday(weekday)

        on_leave = any(period.covers(day) for period in leave)
        if on_leave:
            logger.debug("Provider is on leave on %s", day.to_date_string())

        return DayAvailability(
            date=day,
            weekday=weekday,
            available=hours.available and not on_leave,
            start=hours.start,
            end=hours.end,
            break_window=hours.break_window if hours.available else None,
            on_leave=on_leave,
        )
