"""
In-memory appointment repository, optionally seeded from a JSON fixture.
"""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, List, Optional

import pendulum

from ..domain.models import AppointmentStatus, BookedAppointment, Occurrence, as_date

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_appointments.json"


class InMemoryAppointmentRepository:
    """
    Appointment repository backed by a plain list.

    Every instance owns its own list, so tests and CLI runs never share state.
    Records use the clinic front end's JSON shape (``doctorId``, ``startTime`` ...).
    """

    def __init__(self, appointments: Optional[Iterable[BookedAppointment]] = None):
        self._appointments: List[BookedAppointment] = list(appointments or [])
        self._next_number = len(self._appointments) + 1

    @classmethod
    def from_json(cls, data_file: Path = DEFAULT_DATA_FILE) -> "InMemoryAppointmentRepository":
        """
        Load appointments from a JSON file.

        Args:
            data_file: Path to a JSON array of appointment records

        Returns:
            Repository holding every valid record

        Raises:
            FileNotFoundError: If the data file doesn't exist
            ValueError: If the file is not a JSON array
        """
        if not data_file.exists():
            raise FileNotFoundError(f"Appointment data file not found: {data_file}")

        with open(data_file, "r", encoding="utf-8") as f:
            try:
                records = json.load(f)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid JSON in {data_file}: {exc}") from exc

        if not isinstance(records, list):
            raise ValueError(f"{data_file} must contain a JSON array of appointments")

        appointments: List[BookedAppointment] = []
        for record in records:
            try:
                appointments.append(_parse_record(record))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid appointment record %r: %s", record, exc)

        logger.debug("Loaded %d appointment(s) from %s", len(appointments), data_file)
        return cls(appointments)

    def list_appointments_for_provider_on_date(
        self, provider_id: str, on_date: date
    ) -> List[BookedAppointment]:
        day = as_date(on_date)
        return [
            appointment
            for appointment in self._appointments
            if appointment.provider_id == provider_id and appointment.date == day
        ]

    def create(
        self,
        occurrence: Occurrence,
        *,
        patient_id: Optional[str] = None,
        parent_appointment_id: Optional[str] = None,
    ) -> str:
        candidate = occurrence.candidate
        appointment = BookedAppointment(
            id=self._allocate_id(),
            provider_id=candidate.provider_id,
            date=candidate.date,
            start_time=candidate.start_time,
            end_time=candidate.end_time,
            status=AppointmentStatus.SCHEDULED,
            patient_id=patient_id,
            parent_appointment_id=parent_appointment_id,
        )
        self._appointments.append(appointment)
        return appointment.id

    def _allocate_id(self) -> str:
        existing = {appointment.id for appointment in self._appointments}
        while True:
            appointment_id = f"APT-{self._next_number:03d}"
            self._next_number += 1
            if appointment_id not in existing:
                return appointment_id


def _parse_record(record: dict) -> BookedAppointment:
    return BookedAppointment(
        id=record["id"],
        provider_id=record["doctorId"],
        date=pendulum.parse(record["date"]).date(),
        start_time=_parse_time(record["startTime"]),
        end_time=_parse_time(record["endTime"]),
        status=AppointmentStatus(record.get("status", "scheduled")),
        patient_id=record.get("patientId"),
        parent_appointment_id=record.get("parentAppointmentId"),
    )


def _parse_time(value: str):
    return datetime.strptime(value, "%H:%M").time()
