"""
Provider directory backed by the YAML configuration.
"""

from typing import List

from ..config import AppConfig, ProviderConfig
from ..domain.exceptions import UnknownProviderError
from ..domain.models import LeavePeriod, WeeklyWorkingHours


class ConfigProviderDirectory:
    """Serves working hours, leave and display names of configured providers."""

    def __init__(self, config: AppConfig):
        self.config = config

    def get_provider(self, provider_id: str) -> ProviderConfig:
        """
        Look up a provider by id or last name.

        Raises:
            UnknownProviderError: If no configured provider matches
        """
        provider = self.config.find_provider(provider_id)
        if provider is None:
            raise UnknownProviderError(
                f"Unknown provider: '{provider_id}'. Use a configured provider id or last name."
            )
        return provider

    def get_working_hours(self, provider_id: str) -> WeeklyWorkingHours:
        return self.get_provider(provider_id).weekly_working_hours()

    def get_leave(self, provider_id: str) -> List[LeavePeriod]:
        return self.get_provider(provider_id).approved_leave()

    def get_display_name(self, provider_id: str) -> str:
        return self.get_provider(provider_id).display_name()
