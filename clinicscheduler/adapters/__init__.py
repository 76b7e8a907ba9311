"""
Adapters layer - Provider directory, appointment storage and notifications.
"""

from .appointment_repository import InMemoryAppointmentRepository
from .console_notifier import ConsoleNotificationChannel
from .provider_directory import ConfigProviderDirectory

__all__ = ["ConfigProviderDirectory", "ConsoleNotificationChannel", "InMemoryAppointmentRepository"]
