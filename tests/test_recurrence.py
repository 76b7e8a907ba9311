"""
Tests for the recurrence expander.
"""

from datetime import time

import pendulum
import pytest

from clinicscheduler.domain.exceptions import ConfigurationWarning
from clinicscheduler.domain.models import AppointmentCandidate, Frequency, RecurrencePattern
from clinicscheduler.domain.recurrence import RecurrenceExpander


def _seed(year: int, month: int, day: int) -> AppointmentCandidate:
    return AppointmentCandidate(
        provider_id="DOC-001",
        date=pendulum.date(year, month, day),
        start_time=time(9, 0),
        duration_minutes=30,
    )


def _dates(occurrences):
    return [occurrence.date.to_date_string() for occurrence in occurrences]


class TestBoundedExpansion:
    """Tests for series bounded by a count or an end date."""

    def test_monthly_end_of_month_clamps(self):
        """Jan 31 monthly x3 clamps February and returns to the 31st in March."""
        pattern = RecurrencePattern(frequency=Frequency.MONTHLY, interval=1, occurrences=3)

        occurrences = RecurrenceExpander().expand(_seed(2025, 1, 31), pattern)

        assert _dates(occurrences) == ["2025-01-31", "2025-02-28", "2025-03-31"]

    @pytest.mark.parametrize("frequency", list(Frequency))
    @pytest.mark.parametrize("count", [1, 7, 25])
    def test_exact_count_strictly_ascending(self, frequency, count):
        """Every frequency returns exactly N occurrences in ascending date order."""
        pattern = RecurrencePattern(frequency=frequency, occurrences=count)

        occurrences = RecurrenceExpander().expand(_seed(2024, 1, 31), pattern)

        assert len(occurrences) == count
        assert [o.index for o in occurrences] == list(range(count))
        dates = [o.date for o in occurrences]
        assert all(earlier < later for earlier, later in zip(dates, dates[1:]))

    def test_seed_is_first_occurrence(self):
        seed = _seed(2025, 1, 20)

        occurrences = RecurrenceExpander().expand(
            seed, RecurrencePattern(frequency=Frequency.WEEKLY, occurrences=2)
        )

        assert occurrences[0].candidate == seed

    def test_occurrences_keep_time_and_duration(self):
        """Only the date changes between occurrences."""
        occurrences = RecurrenceExpander().expand(
            _seed(2025, 1, 20), RecurrencePattern(frequency=Frequency.DAILY, occurrences=3)
        )

        for occurrence in occurrences:
            assert occurrence.candidate.provider_id == "DOC-001"
            assert occurrence.candidate.start_time == time(9, 0)
            assert occurrence.candidate.end_time == time(9, 30)
            assert occurrence.candidate.duration_minutes == 30

    def test_daily_interval(self):
        pattern = RecurrencePattern(frequency=Frequency.DAILY, interval=2, occurrences=3)

        assert _dates(RecurrenceExpander().expand(_seed(2025, 2, 27), pattern)) == [
            "2025-02-27",
            "2025-03-01",
            "2025-03-03",
        ]

    def test_weekly_without_days_steps_whole_weeks(self):
        pattern = RecurrencePattern(frequency=Frequency.WEEKLY, interval=2, occurrences=3)

        assert _dates(RecurrenceExpander().expand(_seed(2025, 1, 20), pattern)) == [
            "2025-01-20",
            "2025-02-03",
            "2025-02-17",
        ]

    def test_weekly_on_days(self):
        """Matching weekdays are enumerated in order across week boundaries."""
        pattern = RecurrencePattern(
            frequency=Frequency.WEEKLY, days_of_week=["thu", "mon"], occurrences=5
        )

        assert _dates(RecurrenceExpander().expand(_seed(2025, 1, 20), pattern)) == [
            "2025-01-20",
            "2025-01-23",
            "2025-01-27",
            "2025-01-30",
            "2025-02-03",
        ]

    def test_weekly_on_days_with_interval(self):
        pattern = RecurrencePattern(
            frequency=Frequency.WEEKLY, interval=2, days_of_week=["mon", "wed"], occurrences=5
        )

        assert _dates(RecurrenceExpander().expand(_seed(2025, 1, 20), pattern)) == [
            "2025-01-20",
            "2025-01-22",
            "2025-02-03",
            "2025-02-05",
            "2025-02-17",
        ]

    def test_weekly_on_days_skips_days_before_seed(self):
        """A Wednesday seed with Mondays continues on the following Monday."""
        pattern = RecurrencePattern(frequency=Frequency.WEEKLY, days_of_week=["mon"], occurrences=3)

        assert _dates(RecurrenceExpander().expand(_seed(2025, 1, 22), pattern)) == [
            "2025-01-22",
            "2025-01-27",
            "2025-02-03",
        ]

    def test_monthly_day_of_month(self):
        """A requested day of month applies after the seed and clamps in short months."""
        pattern = RecurrencePattern(frequency=Frequency.MONTHLY, day_of_month=31, occurrences=4)

        assert _dates(RecurrenceExpander().expand(_seed(2025, 1, 15), pattern)) == [
            "2025-01-15",
            "2025-02-28",
            "2025-03-31",
            "2025-04-30",
        ]

    def test_monthly_interval_crosses_year(self):
        pattern = RecurrencePattern(frequency=Frequency.MONTHLY, interval=5, occurrences=3)

        assert _dates(RecurrenceExpander().expand(_seed(2024, 8, 31), pattern)) == [
            "2024-08-31",
            "2025-01-31",
            "2025-06-30",
        ]

    def test_yearly_leap_day(self):
        """Feb 29 seeds fall back to Feb 28 in non-leap years only."""
        pattern = RecurrencePattern(frequency=Frequency.YEARLY, occurrences=5)

        assert _dates(RecurrenceExpander().expand(_seed(2024, 2, 29), pattern)) == [
            "2024-02-29",
            "2025-02-28",
            "2026-02-28",
            "2027-02-28",
            "2028-02-29",
        ]

    def test_end_date_is_inclusive(self):
        pattern = RecurrencePattern(frequency=Frequency.WEEKLY, end_date=pendulum.date(2025, 2, 10))

        assert _dates(RecurrenceExpander().expand(_seed(2025, 1, 20), pattern)) == [
            "2025-01-20",
            "2025-01-27",
            "2025-02-03",
            "2025-02-10",
        ]

    def test_end_date_before_seed_yields_nothing(self):
        pattern = RecurrencePattern(frequency=Frequency.DAILY, end_date=pendulum.date(2025, 1, 1))

        assert RecurrenceExpander().expand(_seed(2025, 1, 20), pattern) == []

    def test_count_wins_over_end_date(self):
        pattern = RecurrencePattern(
            frequency=Frequency.DAILY, occurrences=5, end_date=pendulum.date(2025, 1, 21)
        )

        assert len(RecurrenceExpander().expand(_seed(2025, 1, 20), pattern)) == 5


class TestSafetyCap:
    """Tests for series with neither an end date nor a count."""

    def test_unbounded_daily_is_capped_at_one_year(self):
        pattern = RecurrencePattern(frequency=Frequency.DAILY)

        with pytest.warns(ConfigurationWarning, match="capped at 366 occurrences"):
            occurrences = RecurrenceExpander().expand(_seed(2025, 1, 1), pattern)

        assert len(occurrences) == 365
        assert occurrences[-1].date == pendulum.date(2025, 12, 31)

    def test_unbounded_monthly_stays_within_horizon(self):
        pattern = RecurrencePattern(frequency=Frequency.MONTHLY)

        with pytest.warns(ConfigurationWarning):
            occurrences = RecurrenceExpander().expand(_seed(2025, 1, 15), pattern)

        assert len(occurrences) == 12
        assert occurrences[-1].date == pendulum.date(2025, 12, 15)

    def test_max_occurrences_cap(self):
        pattern = RecurrencePattern(frequency=Frequency.DAILY)

        with pytest.warns(ConfigurationWarning):
            occurrences = RecurrenceExpander(max_occurrences=10).expand(_seed(2025, 1, 1), pattern)

        assert len(occurrences) == 10

    def test_bounded_series_does_not_warn(self, recwarn):
        RecurrenceExpander().expand(
            _seed(2025, 1, 1), RecurrencePattern(frequency=Frequency.DAILY, occurrences=3)
        )

        assert not [w for w in recwarn if issubclass(w.category, ConfigurationWarning)]

    @pytest.mark.parametrize("kwargs", [{"max_occurrences": 0}, {"horizon_months": 0}])
    def test_invalid_cap_raises(self, kwargs):
        with pytest.raises(ValueError):
            RecurrenceExpander(**kwargs)
