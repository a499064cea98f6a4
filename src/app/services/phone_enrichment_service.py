"""Phone Enrichment Service Interface"""

from abc import ABC, abstractmethod
from .external_action import ExternalActionResult


class PhoneEnrichmentService(ABC):

    @abstractmethod
    async def reveal_phone(self, email: str) -> ExternalActionResult:
        """
        Look up a phone number for a contact

        Returns:
            ExternalActionResult with data["phone"] and data["person"] on success,
            or a PHONE_NOT_FOUND failure when the provider has no number

        Raises:
            ExternalServiceError: The provider could not be reached or rejected the call
        """
        pass
