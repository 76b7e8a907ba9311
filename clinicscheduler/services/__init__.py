"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .scheduling import (
    AppointmentRepositoryProtocol,
    BookingResult,
    NotificationChannelProtocol,
    OccurrenceCheck,
    ProviderDirectoryProtocol,
    SchedulingService,
)

__all__ = [
    "AppointmentRepositoryProtocol",
    "BookingResult",
    "NotificationChannelProtocol",
    "OccurrenceCheck",
    "ProviderDirectoryProtocol",
    "SchedulingService",
]
