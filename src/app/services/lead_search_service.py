"""Lead Search Service Interface

Starts paid lead search runs on the actor platform.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict
from .external_action import ExternalActionResult


class LeadSearchService(ABC):

    @abstractmethod
    async def start_search(self, filters: Dict[str, Any], fetch_count: int) -> ExternalActionResult:
        """
        Start a lead search run

        Args:
            filters: Search filters (job_title, company_domain, country, location)
            fetch_count: Number of leads requested

        Returns:
            ExternalActionResult with data["run_id"] on success

        Raises:
            ExternalServiceError: The provider could not be reached or rejected the call
        """
        pass
