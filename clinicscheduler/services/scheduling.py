"""
Application services for checking and booking appointments.

The service fetches provider reference data and existing bookings through
collaborator protocols, then delegates every decision to the pure domain
components (``AvailabilityResolver``, ``ConflictDetector`` and
``RecurrenceExpander``). Fetching always completes before detection runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Protocol, Sequence

from ..domain.availability import AvailabilityResolver
from ..domain.conflicts import ConflictDetector
from ..domain.models import (
    AppointmentCandidate,
    BookedAppointment,
    ConflictFinding,
    LeavePeriod,
    Occurrence,
    RecurrencePattern,
    WeeklyWorkingHours,
)
from ..domain.recurrence import RecurrenceExpander

logger = logging.getLogger(__name__)


class ProviderDirectoryProtocol(Protocol):
    """Protocol describing the provider reference data needed by the service."""

    def get_working_hours(self, provider_id: str) -> WeeklyWorkingHours:
        """Return the weekly working-hours table of a provider."""

    def get_leave(self, provider_id: str) -> Sequence[LeavePeriod]:
        """Return the approved leave periods of a provider."""

    def get_display_name(self, provider_id: str) -> str:
        """Return a human-readable provider name for messages."""


class AppointmentRepositoryProtocol(Protocol):
    """Protocol describing the appointment storage used by the service."""

    def list_appointments_for_provider_on_date(
        self, provider_id: str, on_date: date
    ) -> Sequence[BookedAppointment]:
        """Return the provider's appointments on a date."""

    def create(
        self,
        occurrence: Occurrence,
        *,
        patient_id: Optional[str] = None,
        parent_appointment_id: Optional[str] = None,
    ) -> str:
        """Persist an occurrence and return the new appointment id."""


class NotificationChannelProtocol(Protocol):
    """Receives findings for display. Nothing is read back from it."""

    def notify(self, candidate: AppointmentCandidate, findings: Sequence[ConflictFinding]) -> None:
        """Publish the findings of a candidate."""


@dataclass(frozen=True)
class OccurrenceCheck:
    """Conflict check result for one occurrence of a series."""
    occurrence: Occurrence
    findings: List[ConflictFinding]

    @property
    def bookable(self) -> bool:
        return not self.findings


@dataclass
class BookingResult:
    """Outcome of a booking attempt."""
    checks: List[OccurrenceCheck]
    created_ids: List[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return any(not check.bookable for check in self.checks)

    @property
    def booked(self) -> bool:
        return bool(self.created_ids)


class SchedulingService:
    """
    Orchestrates availability lookups, conflict detection and recurrence.

    Dependency inversion toward protocols lets the in-memory adapters and test
    stubs stand in for real provider and appointment stores.
    """

    def __init__(
        self,
        provider_directory: ProviderDirectoryProtocol,
        appointment_repository: AppointmentRepositoryProtocol,
        notification_channel: Optional[NotificationChannelProtocol] = None,
        *,
        resolver: Optional[AvailabilityResolver] = None,
        detector: Optional[ConflictDetector] = None,
        expander: Optional[RecurrenceExpander] = None,
    ) -> None:
        self._provider_directory = provider_directory
        self._appointment_repository = appointment_repository
        self._notification_channel = notification_channel
        self._resolver = resolver or AvailabilityResolver()
        self._detector = detector or ConflictDetector()
        self._expander = expander or RecurrenceExpander()

    def check_candidate(
        self,
        candidate: AppointmentCandidate,
        *,
        exclude_appointment_id: Optional[str] = None,
    ) -> List[ConflictFinding]:
        """
        Run a single candidate through availability and conflict checks.

        Args:
            candidate: The proposed appointment
            exclude_appointment_id: Appointment being rescheduled, if any

        Returns:
            Ordered conflict findings; empty means bookable
        """
        provider_id = candidate.provider_id

        availability = self._resolver.resolve(
            self._provider_directory.get_working_hours(provider_id),
            candidate.date,
            leave=self._provider_directory.get_leave(provider_id),
        )
        existing = list(
            self._appointment_repository.list_appointments_for_provider_on_date(
                provider_id, candidate.date
            )
        )

        findings = self._detector.detect(
            candidate,
            availability,
            existing,
            provider_name=self._provider_directory.get_display_name(provider_id),
            exclude_appointment_id=exclude_appointment_id,
        )

        if findings:
            logger.info("%d conflict(s) for %s", len(findings), candidate)
            if self._notification_channel is not None:
                self._notification_channel.notify(candidate, findings)

        return findings

    def expand(self, seed: AppointmentCandidate, pattern: RecurrencePattern) -> List[Occurrence]:
        """Expand a recurring appointment without checking it."""
        return self._expander.expand(seed, pattern)

    def check_series(
        self,
        seed: AppointmentCandidate,
        pattern: Optional[RecurrencePattern] = None,
    ) -> List[OccurrenceCheck]:
        """
        Check every occurrence of a (possibly recurring) appointment independently.

        Without a pattern the seed is checked as the single occurrence 0.
        """
        if pattern is None:
            occurrences = [Occurrence(index=0, candidate=seed)]
        else:
            occurrences = self.expand(seed, pattern)

        return [
            OccurrenceCheck(
                occurrence=occurrence,
                findings=self.check_candidate(occurrence.candidate),
            )
            for occurrence in occurrences
        ]

    def book(
        self,
        seed: AppointmentCandidate,
        *,
        pattern: Optional[RecurrencePattern] = None,
        patient_id: Optional[str] = None,
        allow_conflicts: bool = False,
    ) -> BookingResult:
        """
        Check and create an appointment or a whole series.

        Nothing is created when any occurrence has findings, unless the caller
        explicitly allows conflicts. Later occurrences of a series reference the
        first created appointment as their parent.
        """
        checks = self.check_series(seed, pattern)
        result = BookingResult(checks=checks)

        if result.has_conflicts and not allow_conflicts:
            logger.info("Booking of %s blocked by conflicts", seed)
            return result

        parent_id: Optional[str] = None
        for check in checks:
            appointment_id = self._appointment_repository.create(
                check.occurrence,
                patient_id=patient_id,
                parent_appointment_id=parent_id,
            )
            if pattern is not None and parent_id is None:
                parent_id = appointment_id
            result.created_ids.append(appointment_id)

        logger.info("Booked %d appointment(s) for %s", len(result.created_ids), seed.provider_id)
        return result
