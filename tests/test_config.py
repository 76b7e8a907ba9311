"""
Tests for YAML configuration loading.
"""

from datetime import time
from pathlib import Path

import pendulum
import pytest
from pydantic import ValidationError

from clinicscheduler.config import AppConfig, ProviderConfig, WorkingHoursConfig
from clinicscheduler.domain.models import TimeWindow, Weekday

CONFIG_YAML = """
timezone: "America/New_York"
appointments_file: "appointments.json"
recurrence:
  max_occurrences: 52
providers:
  - id: "DOC-001"
    first_name: "John"
    last_name: "Smith"
    working_hours:
      Mon: {start: "08:00", end: "17:00", break_start: "12:00", break_end: "13:00"}
      friday:
        start: 8:00
        end: 15:00
      saturday: {available: false}
    leave:
      - {start_date: 2025-02-10, end_date: 2025-02-14, status: approved, type: conference}
      - {start_date: 2025-03-03, end_date: 2025-03-07, status: pending}
"""


def _write(tmp_path: Path, content: str) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(content, encoding="utf-8")
    return config_path


class TestAppConfig:
    """Tests for AppConfig.load_from_yaml."""

    def test_load_from_yaml(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML))

        assert config.timezone == "America/New_York"
        assert config.recurrence.max_occurrences == 52
        assert config.recurrence.horizon_months == 12
        assert config.booking.duration_minutes == 30
        assert config.appointments_file == tmp_path / "appointments.json"

    def test_weekday_keys_are_normalised(self, tmp_path):
        provider = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML)).providers[0]

        assert set(provider.working_hours) == {"monday", "friday", "saturday"}

    def test_unquoted_times_are_read_as_clock_times(self, tmp_path):
        """YAML's sexagesimal integers are converted back into times."""
        provider = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML)).providers[0]

        assert provider.working_hours["friday"].start == time(8, 0)
        assert provider.working_hours["friday"].end == time(15, 0)

    def test_weekly_working_hours(self, tmp_path):
        provider = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML)).providers[0]

        table = provider.weekly_working_hours()

        assert table.for_weekday(Weekday.MONDAY).break_window == TimeWindow(start=time(12, 0), end=time(13, 0))
        assert not table.for_weekday(Weekday.SATURDAY).available

    def test_only_approved_leave_is_used(self, tmp_path):
        provider = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML)).providers[0]

        leave = provider.approved_leave()

        assert len(leave) == 1
        assert leave[0].start_date == pendulum.date(2025, 2, 10)
        assert leave[0].reason == "conference"

    def test_find_provider_by_id_or_last_name(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML))

        assert config.find_provider("doc-001").id == "DOC-001"
        assert config.find_provider("Smith").id == "DOC-001"
        assert config.find_provider("Jones") is None

    def test_display_name(self):
        provider = ProviderConfig(id="DOC-002", last_name="Rodriguez")

        assert provider.display_name() == "Dr. Rodriguez"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_non_mapping_root_raises(self, tmp_path):
        with pytest.raises(ValueError, match="mapping at the root level"):
            AppConfig.load_from_yaml(_write(tmp_path, "- just\n- a list\n"))

    def test_invalid_yaml_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "providers: [unclosed\n"))

    def test_empty_file_uses_defaults(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, ""))

        assert config.providers == []
        assert config.appointments_file is None


class TestValidation:
    """Tests for configuration validators."""

    def test_duplicate_provider_ids(self):
        with pytest.raises(ValidationError, match="Duplicate provider id"):
            AppConfig(
                providers=[
                    {"id": "DOC-001", "last_name": "Smith"},
                    {"id": "doc-001", "last_name": "Jones"},
                ]
            )

    def test_unknown_weekday_key(self):
        with pytest.raises(ValidationError, match="Unknown weekday"):
            ProviderConfig(id="DOC-001", last_name="Smith", working_hours={"funday": {"start": "08:00", "end": "17:00"}})

    def test_duplicate_weekday_key(self):
        with pytest.raises(ValidationError, match="Duplicate working hours"):
            ProviderConfig(
                id="DOC-001",
                last_name="Smith",
                working_hours={
                    "mon": {"start": "08:00", "end": "17:00"},
                    "monday": {"start": "09:00", "end": "17:00"},
                },
            )

    def test_hours_order(self):
        with pytest.raises(ValidationError, match="must be later than start"):
            WorkingHoursConfig(start="17:00", end="08:00")

    def test_unavailable_day_skips_order_check(self):
        hours = WorkingHoursConfig(available=False)

        assert not hours.to_domain().available

    def test_break_outside_hours(self):
        with pytest.raises(ValidationError, match="break must lie within"):
            WorkingHoursConfig(start="08:00", end="12:00", break_start="11:30", break_end="12:30")

    def test_break_needs_both_ends(self):
        with pytest.raises(ValidationError, match="given together"):
            WorkingHoursConfig(start="08:00", end="17:00", break_start="12:00")

    def test_booking_defaults(self):
        with pytest.raises(ValidationError):
            AppConfig(booking={"duration_minutes": 10, "min_duration_minutes": 15})

    def test_recurrence_cap_positive(self):
        with pytest.raises(ValidationError):
            AppConfig(recurrence={"max_occurrences": 0})

    def test_leave_order(self):
        with pytest.raises(ValidationError, match="end_date must not be before start_date"):
            ProviderConfig(
                id="DOC-001",
                last_name="Smith",
                leave=[{"start_date": "2025-02-14", "end_date": "2025-02-10"}],
            )
