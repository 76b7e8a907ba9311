"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import date, time
from pathlib import Path
from typing import Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import LeavePeriod, TimeWindow, WeeklyWorkingHours, Weekday, WorkingHours


class WorkingHoursConfig(BaseModel):
    """Working hours of one weekday."""
    start: time = time(0, 0)
    end: time = time(0, 0)
    available: bool = True
    break_start: Optional[time] = None
    break_end: Optional[time] = None

    @field_validator("start", "end", "break_start", "break_end", mode="before")
    @classmethod
    def parse_sexagesimal(cls, v):
        """YAML 1.1 reads an unquoted 17:00 as the integer 1020."""
        if isinstance(v, int) and not isinstance(v, bool):
            hours, minutes = divmod(v, 60)
            return time(hour=hours, minute=minutes)
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "WorkingHoursConfig":
        """Ensure the working window opens before it closes and holds the break."""
        if (self.break_start is None) != (self.break_end is None):
            raise ValueError("break_start and break_end must be given together")
        if not self.available:
            return self
        if self.end <= self.start:
            raise ValueError(f"end ({self.end}) must be later than start ({self.start})")
        if self.break_start is not None:
            if not self.start <= self.break_start < self.break_end <= self.end:
                raise ValueError("break must lie within the working hours")
        return self

    def to_domain(self) -> WorkingHours:
        break_window = None
        if self.available and self.break_start is not None:
            break_window = TimeWindow(start=self.break_start, end=self.break_end)
        return WorkingHours(
            start=self.start,
            end=self.end,
            available=self.available,
            break_window=break_window,
        )


class LeaveConfig(BaseModel):
    """Leave record of a provider. Only approved leave blocks bookings."""
    start_date: date
    end_date: date
    type: Literal["vacation", "sick", "emergency", "conference", "other"] = "vacation"
    reason: str = ""
    status: Literal["pending", "approved", "rejected"] = "approved"

    @model_validator(mode="after")
    def validate_dates_order(self) -> "LeaveConfig":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def to_domain(self) -> LeavePeriod:
        return LeavePeriod(
            start_date=self.start_date,
            end_date=self.end_date,
            reason=self.reason or self.type,
        )


class ProviderConfig(BaseModel):
    """Provider (doctor) configuration."""
    id: str
    title: Literal["Dr.", "Prof.", "Mr.", "Ms.", "Mrs."] = "Dr."
    first_name: str = ""
    last_name: str
    specialization: str = ""
    working_hours: Dict[str, WorkingHoursConfig] = Field(default_factory=dict)
    leave: List[LeaveConfig] = Field(default_factory=list)

    @field_validator("working_hours")
    @classmethod
    def validate_weekdays(cls, value: Dict[str, WorkingHoursConfig]) -> Dict[str, WorkingHoursConfig]:
        """Normalise weekday keys ("Mon", "monday") to lowercase full names."""
        normalized: Dict[str, WorkingHoursConfig] = {}
        for key, hours in value.items():
            name = Weekday.parse(key).name.lower()
            if name in normalized:
                raise ValueError(f"Duplicate working hours for {name}")
            normalized[name] = hours
        return normalized

    def display_name(self) -> str:
        """Get display name, e.g. "Dr. Smith"."""
        return f"{self.title} {self.last_name}"

    def weekly_working_hours(self) -> WeeklyWorkingHours:
        return WeeklyWorkingHours.from_mapping(
            {day: hours.to_domain() for day, hours in self.working_hours.items()}
        )

    def approved_leave(self) -> List[LeavePeriod]:
        return [entry.to_domain() for entry in self.leave if entry.status == "approved"]


class BookingDefaults(BaseModel):
    """Default settings for new appointments."""
    duration_minutes: int = 30
    min_duration_minutes: int = 15

    @field_validator("duration_minutes", "min_duration_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("durations must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_default_duration(self) -> "BookingDefaults":
        if self.duration_minutes < self.min_duration_minutes:
            raise ValueError("duration_minutes must not be below min_duration_minutes")
        return self


class RecurrenceConfig(BaseModel):
    """Safety cap for recurrences without an end date or occurrence count."""
    max_occurrences: int = 366
    horizon_months: int = 12

    @field_validator("max_occurrences", "horizon_months")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("recurrence caps must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "UTC"
    providers: List[ProviderConfig] = Field(default_factory=list)
    booking: BookingDefaults = Field(default_factory=BookingDefaults)
    recurrence: RecurrenceConfig = Field(default_factory=RecurrenceConfig)
    appointments_file: Optional[Path] = None

    @field_validator("providers")
    @classmethod
    def validate_providers(cls, value: List[ProviderConfig]) -> List[ProviderConfig]:
        """Ensure provider ids are unique."""
        seen_ids: set[str] = set()
        for provider in value:
            key = provider.id.lower()
            if key in seen_ids:
                raise ValueError(f"Duplicate provider id detected: {provider.id}")
            seen_ids.add(key)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``appointments_file`` is resolved against the config file's directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        if config.appointments_file and not config.appointments_file.is_absolute():
            config.appointments_file = config_path.parent / config.appointments_file
        return config

    def find_provider(self, identifier: str) -> ProviderConfig | None:
        """Find a provider by id or last name (case-insensitive)."""
        key = identifier.lower()
        for provider in self.providers:
            if provider.id.lower() == key:
                return provider
        for provider in self.providers:
            if provider.last_name.lower() == key:
                return provider
        return None


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
