"""
Conflict detection for candidate appointments.

Pure domain logic: the detector never performs I/O and never raises for a
conflict. Findings are ordinary return values; whether they block a booking
is decided by the caller.
"""

from typing import List, Optional, Sequence

from .exceptions import ConfigurationError
from .models import (
    AppointmentCandidate,
    BookedAppointment,
    ConflictFinding,
    ConflictKind,
    DayAvailability,
    format_time,
)


class ConflictDetector:
    """
    Produces conflict findings for a candidate appointment.

    Algorithm:
    1. Outside-hours check against the resolved day availability
    2. Overlap check against every time-blocking appointment of the same
       provider on the same date
    3. Identical start times are reported as double-booking instead of overlap
    4. Findings keep the order: outside-hours first, then existing appointments
       in the order they were given
    """

    def detect(
        self,
        candidate: AppointmentCandidate,
        availability: Optional[DayAvailability],
        existing_appointments: Sequence[BookedAppointment],
        *,
        provider_name: Optional[str] = None,
        exclude_appointment_id: Optional[str] = None,
    ) -> List[ConflictFinding]:
        """
        Detect all conflicts of a candidate appointment.

        Args:
            candidate: The proposed appointment
            availability: Provider availability resolved for the candidate's date
            existing_appointments: Appointments already booked (read-only)
            provider_name: Display name used in messages, defaults to the provider id
            exclude_appointment_id: Appointment being rescheduled, ignored in overlap checks

        Returns:
            Ordered list of ConflictFinding objects; empty means bookable

        Raises:
            ConfigurationError: If availability is missing or belongs to another date
        """
        if availability is None:
            raise ConfigurationError(
                f"No availability resolved for provider {candidate.provider_id} "
                f"on {candidate.date.to_date_string()}"
            )
        if availability.date != candidate.date:
            raise ConfigurationError(
                f"Availability was resolved for {availability.date.to_date_string()}, "
                f"but the candidate is on {candidate.date.to_date_string()}"
            )

        name = provider_name or candidate.provider_id

        findings = self._check_working_hours(candidate, availability, name)
        findings.extend(
            self._check_existing_appointments(
                candidate, existing_appointments, name, exclude_appointment_id
            )
        )
        return findings

    def _check_working_hours(
        self,
        candidate: AppointmentCandidate,
        availability: DayAvailability,
        provider_name: str,
    ) -> List[ConflictFinding]:
        if not availability.available:
            if availability.on_leave:
                message = f"{provider_name} is on leave on {candidate.date.to_date_string()}"
            else:
                message = f"{provider_name} is not available on {availability.weekday.label}s"
            return [ConflictFinding(kind=ConflictKind.OUTSIDE_HOURS, message=message)]

        if candidate.start_time < availability.start or candidate.end_time > availability.end:
            return [
                ConflictFinding(
                    kind=ConflictKind.OUTSIDE_HOURS,
                    message=(
                        f"Appointment is outside {provider_name}'s working hours "
                        f"({availability.window()})"
                    ),
                )
            ]

        if availability.break_window and candidate.window().overlaps(availability.break_window):
            return [
                ConflictFinding(
                    kind=ConflictKind.OUTSIDE_HOURS,
                    message=f"Appointment overlaps {provider_name}'s break ({availability.break_window})",
                )
            ]

        return []

    def _check_existing_appointments(
        self,
        candidate: AppointmentCandidate,
        existing_appointments: Sequence[BookedAppointment],
        provider_name: str,
        exclude_appointment_id: Optional[str],
    ) -> List[ConflictFinding]:
        findings: List[ConflictFinding] = []
        window = candidate.window()

        for existing in existing_appointments:
            if existing.provider_id != candidate.provider_id or existing.date != candidate.date:
                continue
            if not existing.status.blocks_time:
                continue
            if exclude_appointment_id is not None and existing.id == exclude_appointment_id:
                continue

            if existing.start_time == candidate.start_time:
                findings.append(
                    ConflictFinding(
                        kind=ConflictKind.DOUBLE_BOOKING,
                        message=(
                            f"{provider_name} is already booked at "
                            f"{format_time(existing.start_time)} (appointment {existing.id})"
                        ),
                        related_appointment_id=existing.id,
                    )
                )
            elif window.overlaps(existing.window()):
                findings.append(
                    ConflictFinding(
                        kind=ConflictKind.OVERLAP,
                        message=f"Overlaps appointment {existing.id} ({existing.window()})",
                        related_appointment_id=existing.id,
                    )
                )

        return findings
